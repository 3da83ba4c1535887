# src/sources/sample_data.py

"""Embedded catalog served when every remote source has failed."""

from src.models.product import ProductRecord

_SAMPLE_ROWS: tuple[tuple[str, str, str, str, float, int, int], ...] = (
    (
        "sample-1",
        "Wireless Bluetooth Headphones",
        "Premium noise-cancelling wireless headphones with 30-hour "
        "battery life and superior sound quality",
        "Electronics", 199.99, 1250, 890,
    ),
    (
        "sample-2",
        "The Great Gatsby - Classic Novel",
        "F. Scott Fitzgerald's timeless masterpiece about the Jazz Age "
        "and the American Dream",
        "Books", 12.99, 850, 620,
    ),
    (
        "sample-3",
        "Organic Coffee Beans - Premium Blend",
        "Single-origin organic coffee beans, medium roast, ethically "
        "sourced from Colombian highlands",
        "Food & Beverage", 24.99, 650, 480,
    ),
    (
        "sample-4",
        "Smart Fitness Watch",
        "Advanced fitness tracking with heart rate monitor, GPS, and "
        "7-day battery life",
        "Electronics", 299.99, 980, 720,
    ),
    (
        "sample-5",
        "Yoga Mat - Eco-Friendly",
        "Non-slip yoga mat made from natural rubber, 6mm thick, perfect "
        "for all yoga styles",
        "Sports & Fitness", 49.99, 420, 350,
    ),
    (
        "sample-6",
        "Moisturizing Face Cream",
        "Anti-aging face cream with hyaluronic acid, vitamin C, and "
        "natural botanicals",
        "Beauty", 45.99, 380, 290,
    ),
    (
        "sample-7",
        "Stainless Steel Water Bottle",
        "Insulated water bottle keeps drinks cold for 24hrs, hot for "
        "12hrs, BPA-free",
        "Home & Kitchen", 34.99, 720, 540,
    ),
    (
        "sample-8",
        "Wireless Gaming Mouse",
        "High-precision gaming mouse with RGB lighting, programmable "
        "buttons, and ergonomic design",
        "Electronics", 79.99, 1100, 780,
    ),
    (
        "sample-9",
        "Organic Green Tea",
        "Premium loose leaf green tea with antioxidants, sourced from "
        "Japanese tea gardens",
        "Food & Beverage", 18.99, 560, 420,
    ),
    (
        "sample-10",
        "Bluetooth Speaker",
        "Portable waterproof speaker with 360-degree sound and 12-hour "
        "battery life",
        "Electronics", 89.99, 890, 650,
    ),
)


def sample_records() -> list[ProductRecord]:
    """Return fresh copies of the embedded sample records."""
    return [
        {
            "id": product_id,
            "name": name,
            "description": description,
            "category": category,
            "price": price,
            "popularity": popularity,
            "net_feedback": net_feedback,
            "originalIndex": idx,
        }
        for idx, (
            product_id,
            name,
            description,
            category,
            price,
            popularity,
            net_feedback,
        ) in enumerate(_SAMPLE_ROWS)
    ]
