from artify.db.seed import DEFAULT_CATEGORIES, seed
from artify.models.schemas import Role
from artify.services import catalog, identity


def test_seed_is_idempotent(store):
    assert seed(store, password="password") == {"accounts": 3, "categories": len(DEFAULT_CATEGORIES)}
    assert seed(store, password="password") == {"accounts": 0, "categories": 0}

    assert [c.name for c in catalog.list_categories(store)] == [name for name, _ in DEFAULT_CATEGORIES]
    for role, email in ((Role.ADMIN, "admin@app.com"), (Role.CUSTOMER, "customer@app.com"), (Role.EDITOR, "editor@app.com")):
        assert identity.authenticate(store, role, email, "password").email == email


def test_seed_keeps_existing_catalog(store):
    catalog.save_category(store, "Custom", "Only one")
    assert seed(store)["categories"] == 0
    assert len(catalog.list_categories(store)) == 1
