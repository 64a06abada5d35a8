from __future__ import annotations

from typing import List, Optional

from faker import Faker

from .types import Item


MAX_NAME_LENGTH = 25
MAX_CATEGORY_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 18


def generate_fake_item(faker: Optional[Faker] = None) -> Item:
    """Build a valid demo item with short, table-friendly fields."""
    faker = faker or Faker()
    name = faker.catch_phrase()[:MAX_NAME_LENGTH].strip()
    category = faker.word().capitalize()[:MAX_CATEGORY_LENGTH]
    description = faker.sentence(nb_words=15)[:MAX_DESCRIPTION_LENGTH].strip()
    price = faker.pyfloat(min_value=10, max_value=1000, right_digits=2)
    image_path = f"https://example.com/images/{faker.slug()}.jpg"
    return Item(
        name=name,
        price=price,
        description=description,
        category=category,
        image_path=image_path,
    )


def generate_fake_items(count: int = 5, seed: Optional[int] = None) -> List[Item]:
    faker = Faker()
    if seed is not None:
        faker.seed_instance(seed)
    return [generate_fake_item(faker) for _ in range(count)]
