"""Tests for the patient store."""
import json
from concurrent.futures import ThreadPoolExecutor

from medflow.schemas.patient import Gender, PatientUpdate
from medflow.services.patient_store import PatientStore


def test_create_then_list_for_owner(patient_store, ann):
    created = patient_store.create(ann, "owner-1")

    listed = patient_store.list_for("owner-1")
    assert [p.id for p in listed] == [created.id]
    record = listed[0]
    assert record.name == "Ann"
    assert record.age == 34
    assert record.gender == Gender.FEMALE
    assert record.created_by == "owner-1"
    assert record.created_at == record.updated_at


def test_list_for_scopes_by_owner(patient_store, ann, bob):
    patient_store.create(ann, "owner-1")
    patient_store.create(bob, "owner-2")

    assert [p.name for p in patient_store.list_for("owner-1")] == ["Ann"]
    assert [p.name for p in patient_store.list_for("owner-2")] == ["Bob"]
    assert patient_store.list_for("nobody") == []
    assert len(patient_store.list_all()) == 2


def test_persisted_layout_uses_storage_keys(patient_store, storage, ann):
    patient_store.create(ann, "owner-1")
    stored = json.loads(storage.get_item("medflow_patients"))
    assert set(stored[0]) == {
        "id", "name", "age", "gender", "diagnosis", "prescription",
        "createdBy", "createdAt", "updatedAt",
    }
    assert stored[0]["gender"] == "Female"


def test_update_changes_only_field_and_timestamp(patient_store, ann):
    created = patient_store.create(ann, "owner-1")

    updated = patient_store.update(created.id, PatientUpdate(diagnosis="Cluster headache"))

    assert updated.diagnosis == "Cluster headache"
    assert updated.updated_at > created.updated_at
    for field in ("id", "name", "age", "gender", "prescription", "created_by", "created_at"):
        assert getattr(updated, field) == getattr(created, field)
    assert patient_store.get(created.id) == updated


def test_update_timestamps_strictly_increase(patient_store, ann):
    created = patient_store.create(ann, "owner-1")
    first = patient_store.update(created.id, {"age": 35})
    second = patient_store.update(created.id, {"age": 36})
    assert created.updated_at < first.updated_at < second.updated_at


def test_update_ignores_protected_fields(patient_store, ann):
    created = patient_store.create(ann, "owner-1")
    updated = patient_store.update(created.id, {"id": "x", "createdBy": "intruder", "name": "Anne"})
    assert updated.id == created.id
    assert updated.created_by == "owner-1"
    assert updated.name == "Anne"


def test_update_missing_returns_none(patient_store, ann):
    patient_store.create(ann, "owner-1")
    assert patient_store.update("missing", {"name": "Ghost"}) is None


def test_delete(patient_store, ann, bob):
    a = patient_store.create(ann, "owner-1")
    b = patient_store.create(bob, "owner-1")

    assert patient_store.delete(a.id) is True
    assert [p.id for p in patient_store.list_for("owner-1")] == [b.id]


def test_delete_missing_leaves_collection_unchanged(patient_store, storage, ann):
    patient_store.create(ann, "owner-1")
    before = storage.get_item(patient_store.patients_key)

    assert patient_store.delete("missing") is False
    assert storage.get_item(patient_store.patients_key) == before


def test_concurrent_creates_are_all_kept(file_storage, ann):
    store = PatientStore(file_storage)

    with ThreadPoolExecutor(max_workers=10) as pool:
        created = list(pool.map(lambda i: store.create(ann, f"owner-{i % 3}"), range(30)))

    assert sorted(p.id for p in store.list_all()) == sorted(p.id for p in created)


def test_concurrent_updates_to_different_records_are_all_kept(file_storage, ann):
    store = PatientStore(file_storage)
    created = [store.create(ann, "owner-1") for _ in range(20)]

    with ThreadPoolExecutor(max_workers=10) as pool:
        list(pool.map(lambda p: store.update(p.id, {"diagnosis": f"Case {p.id}"}), created))

    assert all(p.diagnosis == f"Case {p.id}" for p in store.list_all())
