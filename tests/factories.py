# tests/factories.py
"""Сирі відповіді Printful API для тестів."""

CDN = "https://files.cdn.printful.com"
CATALOG_PRODUCT_ID = 71


def preview_url(sku: str) -> str:
    return f"{CDN}/files/ab/{sku.lower()}_preview.png"


def remote_files(sku: str, file_id: int):
    return [
        {
            "id": file_id, "type": "default", "hash": f"hash-{file_id}",
            "url": f"{CDN}/files/de/{sku.lower()}_design.png", "filename": f"{sku}_design.png",
            "mime_type": "image/png", "size": 20480, "width": 1800, "height": 2400, "dpi": 150,
            "status": "ok", "thumbnail_url": f"{CDN}/files/de/{sku.lower()}_thumb.png",
            "preview_url": f"{CDN}/files/de/{sku.lower()}_design_preview.png",
            "visible": True, "is_temporary": False,
        },
        {
            "id": file_id + 1, "type": "preview", "hash": None, "url": None,
            "filename": f"{sku}_mockup.png", "mime_type": "image/png", "status": "ok",
            "thumbnail_url": None, "preview_url": preview_url(sku),
            "visible": True, "is_temporary": False,
        },
    ]


def remote_variant(variant_id: int, sku: str, color: str = "Black", size: str = "M",
                   price: str = "25.00", catalog_variant_id: int = None, category_id: int = 24,
                   files=None, options=None, name: str = None):
    catalog_variant_id = catalog_variant_id or 4000 + variant_id
    return {
        "id": variant_id,
        "external_id": f"ext-{variant_id}",
        "sync_product_id": 1,
        "name": name or f"Shirt / {color} / {size}",
        "synced": True,
        "variant_id": catalog_variant_id,
        "main_category_id": category_id,
        "warehouse_product_variant_id": None,
        "retail_price": price,
        "currency": "EUR",
        "sku": sku,
        "size": size,
        "color": color,
        "is_ignored": False,
        "availability_status": "active",
        "product": {
            "variant_id": catalog_variant_id,
            "product_id": CATALOG_PRODUCT_ID,
            "image": f"{CDN}/products/71/{catalog_variant_id}_1581412541.jpg",
            "name": f"Unisex Staple T-Shirt ({color} / {size})",
        },
        "files": remote_files(sku, variant_id * 10) if files is None else files,
        "options": [
            {"id": "embroidery_type", "value": "flat"},
            {"id": "thread_colors", "value": ["#FFFFFF", "#000000"]},
        ] if options is None else options,
    }


def remote_product(product_id: int, name: str, variants, thumbnail_url: str = None, is_ignored: bool = False):
    return {
        "sync_product": {
            "id": product_id,
            "external_id": f"ext-p-{product_id}",
            "name": name,
            "variants": len(variants),
            "synced": len(variants),
            "thumbnail_url": thumbnail_url or f"{CDN}/files/ff/product_{product_id}_thumb.png",
            "is_ignored": is_ignored,
        },
        "sync_variants": variants,
    }


def remote_category(category_id: int = 24, title: str = "T-Shirts"):
    slug = title.lower()
    return {
        "id": category_id,
        "parent_id": 6,
        "image_url": f"{CDN}/o/upload/catalog_category/ab/{slug}.jpg?v=1652962461",
        "size": "small",
        "title": title,
    }
