"""Random test events for administrators trying out the dashboard"""

import random
from datetime import date, time, timedelta
from typing import Optional

from shiftease.models.event import EventCreate
from shiftease.services.event_service import utc_today

EVENT_IMAGES = [
    "https://images.unsplash.com/photo-1541701494587-cb58502866ab",
    "https://images.unsplash.com/photo-1550859492-d5da9d8e45f3",
    "https://images.unsplash.com/photo-1618005182384-a83a8bd57fbe",
    "https://images.unsplash.com/photo-1614850715649-1d0106293bd1",
    "https://images.pexels.com/photos/1103970/pexels-photo-1103970.jpeg",
    "https://images.pexels.com/photos/30708629/pexels-photo-30708629.jpeg",
    "https://images.pexels.com/photos/2110951/pexels-photo-2110951.jpeg",
    "https://images.pexels.com/photos/29533798/pexels-photo-29533798.jpeg",
    "https://images.pexels.com/photos/15315570/pexels-photo-15315570.jpeg",
    "https://images.pexels.com/photos/2693212/pexels-photo-2693212.png",
]

SAMPLE_TITLES = [
    "Team Meeting",
    "Product Launch",
    "Workshop",
    "Conference",
    "Webinar",
    "Networking Event",
    "Hackathon",
    "Training Session",
    "Annual Gala",
    "Tech Demo",
]

SAMPLE_DESCRIPTIONS = [
    "Join us for an exciting discussion about upcoming projects.",
    "Discover the latest innovations in our product line.",
    "Learn new skills in this hands-on workshop session.",
    "Connect with industry experts and peers.",
    "Gain insights from our expert speakers.",
    "A great opportunity to meet and connect with professionals.",
    "Compete, code, and create in this intense hackathon!",
    "Improve your skills with guidance from experienced mentors.",
    "Celebrate the successes of the year with us!",
    "Experience live demonstrations of our latest tech solutions.",
]

SAMPLE_CAPACITY = 5
SAMPLE_STANDBY_CAPACITY = 2


def generate_random_event(
    today: Optional[date] = None, rng: Optional[random.Random] = None
) -> EventCreate:
    """
    Build a random event within the next 30 days, counted from the same UTC
    date that splits upcoming events from the archive.

    The start hour stops at 22:00 so the one hour slot never crosses
    midnight.
    """
    rng = rng or random.Random()
    today = today or utc_today()

    start = time(hour=rng.randint(0, 22), minute=rng.randint(0, 59))
    end = time(hour=start.hour + 1, minute=start.minute)

    return EventCreate(
        title=rng.choice(SAMPLE_TITLES),
        description=rng.choice(SAMPLE_DESCRIPTIONS),
        event_date=today + timedelta(days=rng.randint(0, 29)),
        start_time=start,
        end_time=end,
        image_url=rng.choice(EVENT_IMAGES),
        capacity=SAMPLE_CAPACITY,
        standby_capacity=SAMPLE_STANDBY_CAPACITY,
    )
