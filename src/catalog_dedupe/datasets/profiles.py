from __future__ import annotations

# Product lines used to seed synthetic catalogs: (brand, category, base name, sku stem).
PRODUCT_LINES = [
    ("Apple", "Smartphones", "iPhone 15 Pro", "APPLE-IP15P"),
    ("Apple", "Laptops", "MacBook Air 13", "APPLE-MBA13"),
    ("Samsung", "Smartphones", "Galaxy S24 Ultra", "SAMSUNG-S24U"),
    ("Samsung", "Televisions", "Neo QLED 65", "SAMSUNG-QN65"),
    ("Sony", "Headphones", "WH-1000XM5 Wireless", "SONY-WH1000XM5"),
    ("Sony", "Consoles", "PlayStation 5 Slim", "SONY-PS5S"),
    ("Nike", "Footwear", "Air Jordan 1 Mid", "NIKE-AJ1M"),
    ("Nike", "Footwear", "Pegasus 40 Running Shoe", "NIKE-PEG40"),
    ("Adidas", "Footwear", "Ultraboost Light", "ADIDAS-UBL"),
    ("Dyson", "Home Appliances", "V15 Detect Vacuum", "DYSON-V15D"),
    ("Lego", "Toys", "Millennium Falcon Set", "LEGO-75192"),
    ("Bosch", "Tools", "Cordless Drill 18V", "BOSCH-GSR18"),
]

COLOURS = ["Black", "White", "Silver", "Blue", "Red", "Space Grey"]
CAPACITIES = ["64", "128", "256", "512"]

DESCRIPTION_TEMPLATES = [
    "{name} by {brand}. Official {category_lower} with full manufacturer warranty.",
    "Brand new {name} in {colour}. Ships in original packaging.",
    "{brand} {name}, {colour} edition, {capacity} variant.",
]
