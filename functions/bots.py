import logging
import random
import string
import time

import variables as var
from functions.photos import storage_path, upload_bytes

logger = logging.getLogger(__name__)

MALE_NAMES = [
    "Alex", "Daniel", "Max", "Arthur", "Ivan", "Michael", "Nicholas",
    "Sergey", "Vladimir", "Andrew", "Paul", "Kirill", "Dennis", "Egor",
]
FEMALE_NAMES = [
    "Anna", "Maria", "Elena", "Olga", "Natalie", "Tatiana", "Irina",
    "Kate", "Svetlana", "Julia", "Daria", "Victoria", "Anastasia", "Polina",
]

CITIES = [
    "Moscow", "Saint Petersburg", "Novosibirsk", "Yekaterinburg", "Kazan",
    "Nizhny Novgorod", "Chelyabinsk", "Samara", "Omsk", "Rostov-on-Don",
]

ABOUT_ME = [
    "I love an active lifestyle, travelling and new experiences",
    "I value honesty and sincerity in a relationship",
    "I work in IT, into sports and reading",
    "I love cooking, walks in the park and going to the theatre",
    "I do yoga and I am interested in psychology",
    "Entrepreneur, looking for someone for a serious relationship",
]

VALUES = [
    "Honesty and trust",
    "Respect and support",
    "Shared interests and goals",
    "Family values",
    "Mutual understanding",
]

FAMILY_GOALS = [
    "I want to build a strong family",
    "I am planning children in the future",
    "I dream of a happy family life",
    "Ready for a serious relationship",
]

PHOTO_PAUSE_SECONDS = 2


def _gender_for(name):
    if name in MALE_NAMES:
        return "male"
    if name in FEMALE_NAMES:
        return "female"
    return None


def random_bot_profile(rng=random):
    gender = rng.choice(var.genders)
    name = rng.choice(MALE_NAMES if gender == "male" else FEMALE_NAMES)
    return {
        var.col_name: name,
        var.col_age: rng.randint(25, 44),
        var.col_gender: gender,
        var.col_city: rng.choice(CITIES),
        var.col_phone: "+7" + "".join(rng.choices(string.digits, k=10)),
        var.col_about_me: rng.choice(ABOUT_ME),
        var.col_values: rng.choice(VALUES),
        var.col_family_goals: rng.choice(FAMILY_GOALS),
        var.col_zodiac_sign: rng.choice(var.zodiac_signs),
        var.col_smoking: rng.choice(var.smoking_values),
        var.col_alcohol: rng.choice(var.alcohol_values),
        var.col_children: rng.choice(var.children_values),
        var.col_looking_for: "female" if gender == "male" else "male",
        var.col_is_bot: True,
    }


def list_bots(client, columns="*"):
    return (
        client.table(var.table_profiles)
        .select(columns)
        .eq(var.col_is_bot, True)
        .execute()
        .data or []
    )


# --------------------------------------------------
# CREATE
# --------------------------------------------------
def create_bots(client, count=50, rng=random):
    created = []
    stamp = int(time.time() * 1000)

    for i in range(count):
        profile = random_bot_profile(rng)
        email = f"bot{i + 1}_{stamp}{var.bot_email_domain}"
        password = "BotPass" + "".join(rng.choices(string.ascii_letters + string.digits, k=10)) + "!1"

        try:
            auth = client.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"name": profile[var.col_name]},
            })
        except Exception:
            logger.exception("Error creating bot %d", i + 1)
            continue

        profile[var.col_id] = auth.user.id
        try:
            client.table(var.table_profiles).insert(profile).execute()
        except Exception:
            logger.exception("Error creating profile for bot %d", i + 1)
            continue

        created.append({"id": auth.user.id, "name": profile[var.col_name], "email": email})

    logger.info("Created %d of %d bots", len(created), count)
    return {"success": True, "created": len(created), "bots": created}


# --------------------------------------------------
# PHOTOS
# --------------------------------------------------
def photo_prompt(bot):
    who = "man" if bot.get(var.col_gender) == "male" else "woman"
    return (
        f"Realistic portrait photo of a friendly {bot.get(var.col_age)} year old {who}, "
        "natural light, casual clothes, smiling, dating profile picture, no text"
    )


def regenerate_photo(client, image_client, bot):
    data = image_client.generate_image(photo_prompt(bot))
    url = upload_bytes(client, storage_path(bot[var.col_id], "avatar.png"), data, "image/png")
    client.table(var.table_profiles).update({
        var.col_photo_url: url,
        var.col_photos: [url],
    }).eq(var.col_id, bot[var.col_id]).execute()
    return url


def update_bot_photos(client, image_client, sleep=time.sleep):
    bots = list_bots(client, f"{var.col_id},{var.col_name},{var.col_age},{var.col_gender}")
    logger.info("Found %d bots to update", len(bots))

    updated, failed = [], []
    for bot in bots:
        try:
            regenerate_photo(client, image_client, bot)
        except Exception as e:
            logger.exception("Failed to update photo for %s", bot.get(var.col_name))
            failed.append({"name": bot.get(var.col_name), "error": str(e)})
            continue
        updated.append(bot.get(var.col_name))
        # image endpoints rate limit aggressively
        sleep(PHOTO_PAUSE_SECONDS)

    return {
        "success": True,
        "total": len(bots),
        "updated": len(updated),
        "failed": len(failed),
        "updatedBots": updated,
        "failedBots": failed,
    }


# --------------------------------------------------
# CLEANUP
# --------------------------------------------------
def cleanup_bots(client, keep_per_gender=5):
    """Keep a few distinct-name bots per gender, delete the rest, fix genders."""
    bots = list_bots(client)

    kept = {"male": {}, "female": {}}
    for bot in bots:
        gender = _gender_for(bot.get(var.col_name))
        if gender is None:
            continue
        bucket = kept[gender]
        if bot[var.col_name] not in bucket and len(bucket) < keep_per_gender:
            bucket[bot[var.col_name]] = bot

    keep = [b for bucket in kept.values() for b in bucket.values()]
    keep_ids = {b[var.col_id] for b in keep}
    delete_ids = [b[var.col_id] for b in bots if b[var.col_id] not in keep_ids]

    if delete_ids:
        client.table(var.table_profiles).delete().in_(var.col_id, delete_ids).execute()
        logger.info("Deleted %d extra bots", len(delete_ids))

    for bot in keep:
        gender = _gender_for(bot[var.col_name])
        if bot.get(var.col_gender) != gender:
            client.table(var.table_profiles).update({
                var.col_gender: gender,
                var.col_looking_for: "female" if gender == "male" else "male",
            }).eq(var.col_id, bot[var.col_id]).execute()
            logger.info("Updated %s to %s", bot[var.col_name], gender)

    return {
        "success": True,
        "message": f"Cleaned up bots. Kept {len(keep)} bots.",
        "kept": len(keep),
        "deleted": len(delete_ids),
        "bots": sorted(keep_ids),
    }


def delete_bot_users(client):
    users = client.auth.admin.list_users()
    bot_users = [u for u in users if (u.email or "").endswith(var.bot_email_domain)]
    logger.info("Found %d bot users to delete", len(bot_users))

    deleted = failed = 0
    for user in bot_users:
        try:
            client.auth.admin.delete_user(user.id)
            deleted += 1
        except Exception:
            logger.exception("Failed to delete user %s", user.email)
            failed += 1

    return {
        "success": True,
        "message": f"Deleted {deleted} bot users. Failed: {failed}",
        "deletedCount": deleted,
        "failedCount": failed,
    }
