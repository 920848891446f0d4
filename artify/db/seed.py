"""
Load the demo accounts and the default service catalog.

    artify-seed --password password
"""
import argparse
from typing import Optional

from artify.core.errors import EmailTaken
from artify.core.logging import logger
from artify.db.firebase_ops import FirestoreBaseModel, get_firestore_ops_instance
from artify.services import catalog, identity

DEFAULT_CATEGORIES = [
    ("Thumbnail-Designing", "Enhance your content's visibility with custom thumbnail designs that capture attention and drive engagement."),
    ("Poster-Designing", "Grab your audience's attention with striking poster designs that convey your message with impact."),
    ("Photo-Editing", "Elevate your imagery with our professional photo editing services."),
    ("Logo-Designing", "Create a lasting impression with a unique logo that encapsulates your brand identity."),
    ("Video-Designing", "Elevate your videos with expert editing that turns raw footage into captivating stories."),
    ("Digital-Art", "Transform your ideas into digital masterpieces with our Digital Art services."),
]


def seed(firestore_ops: FirestoreBaseModel, password: str = "password") -> dict:
    """
    Create the admin, demo customer, demo editor and default categories.
    Accounts that already exist are left alone, and categories are only added
    to an empty catalog, so running it twice is harmless.
    """
    created = {"accounts": 0, "categories": 0}
    accounts = [
        lambda: identity.create_admin(firestore_ops, "Admin", "admin@app.com", password),
        lambda: identity.register_customer(firestore_ops, "Customer", "customer@app.com", password),
        lambda: identity.register_editor(
            firestore_ops, "Editor", "editor@app.com", password,
            experience="3 years", portfolio="https://www.google.com", skills="Photo Editing", awards="Best Editor",
        ),
    ]
    for create in accounts:
        try:
            create()
            created["accounts"] += 1
        except EmailTaken:
            pass

    if not catalog.list_categories(firestore_ops):
        for name, description in DEFAULT_CATEGORIES:
            catalog.save_category(firestore_ops, name, description)
            created["categories"] += 1

    logger.info(f"Database has been seeded: {created}")
    return created


def main(argv: Optional[list] = None):
    parser = argparse.ArgumentParser(description="Seed the Artify database")
    parser.add_argument("--password", default="password", help="Password for the demo accounts (min 8 chars)")
    args = parser.parse_args(argv)
    seed(get_firestore_ops_instance(), args.password)


if __name__ == "__main__":
    main()
