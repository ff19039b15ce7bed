from spotfeed.config import db
from spotfeed.db.utils import encode_geohash

COLLECTIONS = ("global_pois", "ephemeral_spots", "photos")


def migrate_collection(client, name):
    collection_ref = client.collection(name)
    docs = collection_ref.stream()

    updated_count = 0
    skipped_count = 0
    error_count = 0

    for doc in docs:
        try:
            data = doc.to_dict()

            # Skip if geohash already exists
            if data.get("geohash"):
                skipped_count += 1
                continue

            location = data.get("location")
            if location is None:
                skipped_count += 1
                continue

            geohash_value = encode_geohash(location.latitude, location.longitude)
            collection_ref.document(doc.id).update({"geohash": geohash_value})

            updated_count += 1
            print(f"✅ Updated {name}/{doc.id} with geohash {geohash_value}")

        except Exception as e:
            error_count += 1
            print(f"❌ Error updating {name}/{doc.id}: {e}")

    print(f"\n--- {name}: Migration Complete ---")
    print(f"Updated: {updated_count}")
    print(f"Skipped: {skipped_count}")
    print(f"Errors: {error_count}")
    return updated_count, skipped_count, error_count


def migrate_all():
    if db is None:
        raise SystemExit("Firestore not initialized.")
    for name in COLLECTIONS:
        migrate_collection(db, name)


if __name__ == "__main__":
    migrate_all()
