"""Factory Boy definition for :class:`pointatlas.models.marker.Marker`."""

from __future__ import annotations

import factory
from factory import fuzzy

from pointatlas.models.base import utcnow
from pointatlas.models.marker import Marker
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class MarkerFactory(BaseFactory):
    """Persisted markers with a random owner and position."""

    class Meta:
        model = Marker

    title = factory.Sequence(lambda n: f"Marker {n:03d}")
    description = factory.Faker("sentence", nb_words=8)
    latitude = fuzzy.FuzzyFloat(-60.0, 60.0)
    longitude = fuzzy.FuzzyFloat(-170.0, 170.0)
    category = "Park"
    properties = factory.LazyFunction(dict)
    created_by = factory.SubFactory(UserFactory)
    created_at = factory.LazyFunction(utcnow)
    updated_at = factory.SelfAttribute("created_at")
