"""Tests for the key-value storage."""


def test_get_set_remove(storage):
    assert storage.get_item("medflow_thing") is None

    storage.set_item("medflow_thing", "[1]")
    storage.set_item("medflow_thing", "[1, 2]")
    assert storage.get_item("medflow_thing") == "[1, 2]"

    storage.remove_item("medflow_thing")
    assert storage.get_item("medflow_thing") is None
    # removing twice is a no-op
    storage.remove_item("medflow_thing")


def test_namespaced_layout(storage, identity_store, patient_store, ann):
    account = identity_store.register("alice", "pw")
    patient_store.create(ann, account.id)

    assert storage.keys() == ["medflow_current_user", "medflow_patients", "medflow_users"]

    identity_store.logout()
    assert storage.keys() == ["medflow_patients", "medflow_users"]
