"""
Sample rows inserted on first startup when the events table is empty.

Every sample user's password is "password123".
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from tickettango.core.security import hash_password

SAMPLE_PASSWORD = "password123"

SAMPLE_USERS = [
    {"username": "testuser1", "email": "test1@example.com"},
    {"username": "testuser2", "email": "test2@example.com"},
    {"username": "admin", "email": "admin@example.com"},
]

SAMPLE_EVENTS = [
    {
        "title": "Rock Concert: The Thunder",
        "description": "An electrifying rock concert featuring local and international artists",
        "category": "performance",
        "venue": "Madison Square Garden",
        "event_date": datetime(2027, 3, 15, 19, 0, tzinfo=timezone.utc),
        "price": Decimal("89.99"),
        "total_tickets": 500,
        "image_url": "https://images.unsplash.com/photo-1493225457124-a3eb161ffa5f?w=800",
    },
    {
        "title": "Jazz Night Live",
        "description": "Smooth jazz evening with renowned musicians",
        "category": "performance",
        "venue": "Blue Note Club",
        "event_date": datetime(2027, 3, 20, 20, 0, tzinfo=timezone.utc),
        "price": Decimal("65.00"),
        "total_tickets": 150,
        "image_url": "https://images.unsplash.com/photo-1415201364774-f6f0bb35f28f?w=800",
    },
    {
        "title": "Classical Symphony",
        "description": "Beautiful classical music performed by the city orchestra",
        "category": "performance",
        "venue": "Concert Hall",
        "event_date": datetime(2027, 3, 25, 19, 30, tzinfo=timezone.utc),
        "price": Decimal("75.50"),
        "total_tickets": 300,
        "image_url": "https://images.unsplash.com/photo-1465847899084-d164df4dedc6?w=800",
    },
    {
        "title": "Web Development Workshop",
        "description": "Learn modern web development with React and Node.js",
        "category": "workshop",
        "venue": "Tech Hub",
        "event_date": datetime(2027, 3, 18, 10, 0, tzinfo=timezone.utc),
        "price": Decimal("299.00"),
        "total_tickets": 30,
        "image_url": "https://images.unsplash.com/photo-1517180102446-f3ece451e9d8?w=800",
    },
    {
        "title": "Photography Masterclass",
        "description": "Master the art of photography with professional tips",
        "category": "workshop",
        "venue": "Creative Studios",
        "event_date": datetime(2027, 3, 22, 14, 0, tzinfo=timezone.utc),
        "price": Decimal("199.00"),
        "total_tickets": 25,
        "image_url": "https://images.unsplash.com/photo-1502920917128-1aa500764cbd?w=800",
    },
    {
        "title": "Digital Marketing Summit",
        "description": "Learn the latest digital marketing strategies",
        "category": "workshop",
        "venue": "Business Center",
        "event_date": datetime(2027, 3, 28, 9, 0, tzinfo=timezone.utc),
        "price": Decimal("399.00"),
        "total_tickets": 50,
        "image_url": "https://images.unsplash.com/photo-1460925895917-afdab827c52f?w=800",
    },
    {
        "title": "Pop Concert: City Lights",
        "description": "Popular music concert with chart-topping hits",
        "category": "performance",
        "venue": "Arena Stadium",
        "event_date": datetime(2027, 4, 5, 18, 0, tzinfo=timezone.utc),
        "price": Decimal("95.00"),
        "total_tickets": 800,
        "image_url": "https://images.unsplash.com/photo-1506157786151-b8491531f063?w=800",
    },
    {
        "title": "Cooking Workshop: Italian Cuisine",
        "description": "Learn to cook authentic Italian dishes",
        "category": "workshop",
        "venue": "Culinary Institute",
        "event_date": datetime(2027, 4, 10, 11, 0, tzinfo=timezone.utc),
        "price": Decimal("149.00"),
        "total_tickets": 20,
        "image_url": "https://images.unsplash.com/photo-1556909114-f6e7ad7d3136?w=800",
    },
]


def sample_users() -> list[dict[str, Any]]:
    password_hash = hash_password(SAMPLE_PASSWORD)
    return [{**user, "password_hash": password_hash} for user in SAMPLE_USERS]


def sample_events() -> list[dict[str, Any]]:
    # Every sample event starts fully available
    return [{**event, "available_tickets": event["total_tickets"]} for event in SAMPLE_EVENTS]
