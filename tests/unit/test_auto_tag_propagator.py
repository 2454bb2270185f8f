"""
Unit tests for AutoTagPropagator: naming, propagation and atomicity.
"""
import math

import pytest

from eventpix.application.services.auto_tag_propagator import AutoTagPropagator
from eventpix.domain.exceptions import (
    DatabaseError,
    NamingFailedError,
    NotFoundError,
    TransactionConflictError,
    ValidationError,
)
from tests.fakes import at_distance, unit

E1 = unit(1, 0, 0, 0)
E2 = unit(0, 1, 0, 0)


@pytest.fixture
def propagator(store):
    return AutoTagPropagator(store, propagation_threshold=0.75, max_retries=2)


class TestNameFace:
    @pytest.mark.asyncio
    async def test_propagates_only_to_unlabeled_faces(self, store, propagator):
        target = await store.seed_face(E1)
        close = await store.seed_face(at_distance(E1, 0.3))
        edge = await store.seed_face(at_distance(E1, 0.7))
        dave = await store.rename_or_create_person("Dave")
        labeled = await store.seed_face(at_distance(E1, 0.5), person_id=dave.id)
        unrelated = await store.seed_face(E2)

        result = await propagator.name_face(target.id, "Carol")

        assert result.person.name == "Carol"
        assert result.propagated_face_ids == [close.id, edge.id]
        assert result.all_face_ids == [target.id, close.id, edge.id]
        for face_id in result.all_face_ids:
            assert store.faces[face_id].person_id == result.person.id
        assert store.faces[labeled.id].person_id == dave.id
        assert store.faces[unrelated.id].person_id is None

    @pytest.mark.asyncio
    async def test_never_overwrites_existing_labels(self, store, propagator):
        alice = await store.rename_or_create_person("Alice")
        bob = await store.rename_or_create_person("Bob")
        face_a = await store.seed_face(E1, person_id=alice.id)
        face_b = await store.seed_face(at_distance(E1, 0.1), person_id=bob.id)
        face_c = await store.seed_face(at_distance(E1, 0.05))

        result = await propagator.name_face(face_c.id, "Carol")

        assert result.propagated_face_ids == []
        assert store.faces[face_a.id].person_id == alice.id
        assert store.faces[face_b.id].person_id == bob.id

    @pytest.mark.asyncio
    async def test_existing_name_reuses_person(self, store, propagator):
        first = await store.seed_face(E1)
        second = await store.seed_face(E2)

        one = await propagator.name_face(first.id, "Carol")
        two = await propagator.name_face(second.id, "  carol ")

        assert one.person.id == two.person.id
        assert len(store.persons) == 1

    @pytest.mark.asyncio
    async def test_renaming_a_labeled_face_moves_it(self, store, propagator):
        face = await store.seed_face(E1)
        await propagator.name_face(face.id, "Carol")

        result = await propagator.name_face(face.id, "Caroline")

        assert store.faces[face.id].person_id == result.person.id
        assert result.person.name == "Caroline"

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, store, propagator):
        face = await store.seed_face(E1)
        with pytest.raises(ValidationError):
            await propagator.name_face(face.id, "   ")
        assert store.transactions_started == 0

    @pytest.mark.asyncio
    async def test_unknown_face(self, propagator):
        with pytest.raises(NotFoundError):
            await propagator.name_face("face-404", "Carol")

    @pytest.mark.asyncio
    async def test_face_at_exact_threshold_not_propagated(self, store):
        propagator = AutoTagPropagator(store, propagation_threshold=math.sqrt(2))
        target = await store.seed_face(E1)
        boundary = await store.seed_face(E2)
        inside = await store.seed_face(at_distance(E1, 1.0))

        result = await propagator.name_face(target.id, "Carol")

        assert result.propagated_face_ids == [inside.id]
        assert store.faces[boundary.id].person_id is None


class TestAtomicity:
    @pytest.mark.asyncio
    async def test_failure_rolls_back_every_step(self, store, propagator):
        target = await store.seed_face(E1)
        neighbour = await store.seed_face(at_distance(E1, 0.2))
        store.inject_failure("label_unlabeled_faces", DatabaseError("write failed", operation="update_many"))

        with pytest.raises(NamingFailedError) as exc_info:
            await propagator.name_face(target.id, "Carol")

        assert exc_info.value.operation == "name_face"
        assert store.transactions_rolled_back == 1
        assert store.faces[target.id].person_id is None
        assert store.faces[neighbour.id].person_id is None
        assert store.persons == {}

    @pytest.mark.asyncio
    async def test_conflict_is_retried(self, store, propagator):
        target = await store.seed_face(E1)
        store.inject_failure("set_face_person", TransactionConflictError("write conflict"), times=1)

        result = await propagator.name_face(target.id, "Carol")

        assert store.transactions_started == 2
        assert store.faces[target.id].person_id == result.person.id

    @pytest.mark.asyncio
    async def test_concurrent_creation_of_same_name_is_retried(self, store, propagator):
        target = await store.seed_face(E1)
        store.inject_failure(
            "rename_or_create_person",
            TransactionConflictError("duplicate name key", operation="rename_or_create_person"),
            times=1,
        )

        result = await propagator.name_face(target.id, "Carol")

        assert store.transactions_rolled_back == 1
        assert [person.name for person in store.persons.values()] == ["Carol"]
        assert store.faces[target.id].person_id == result.person.id

    @pytest.mark.asyncio
    async def test_persistent_conflict_reports_naming_failure(self, store, propagator):
        target = await store.seed_face(E1)
        store.inject_failure("set_face_person", TransactionConflictError("write conflict"))

        with pytest.raises(NamingFailedError):
            await propagator.name_face(target.id, "Carol")

        assert store.transactions_started == 3
        assert store.faces[target.id].person_id is None
