import logging

import variables as var
from functions.validations import ProfileForm
from supabase_client import first_row

logger = logging.getLogger(__name__)


def get_profile(client, profile_id):
    res = (
        client.table(var.table_profiles)
        .select("*")
        .eq(var.col_id, profile_id)
        .limit(1)
        .execute()
    )
    return first_row(res)


def get_profiles(client, profile_ids):
    ids = list({str(i) for i in profile_ids if i})
    if not ids:
        return []
    return (
        client.table(var.table_profiles)
        .select("*")
        .in_(var.col_id, ids)
        .execute()
        .data or []
    )


def _profile_row(form: ProfileForm):
    row = form.model_dump()
    row[var.col_photo_url] = form.photos[0] if form.photos else None
    return row


def create_profile(client, user_id, form: ProfileForm):
    row = _profile_row(form)
    row[var.col_id] = user_id
    res = client.table(var.table_profiles).insert(row).execute()
    logger.info("Created profile %s", user_id)
    return first_row(res)


def update_profile(client, user_id, form: ProfileForm):
    res = (
        client.table(var.table_profiles)
        .update(_profile_row(form))
        .eq(var.col_id, user_id)
        .execute()
    )
    return first_row(res)


def set_photos(client, user_id, photos):
    client.table(var.table_profiles).update({
        var.col_photos: photos,
        var.col_photo_url: photos[0] if photos else None,
    }).eq(var.col_id, user_id).execute()


# --------------------------------------------------
# HONESTY RATING
# --------------------------------------------------
def honesty_percent(rating):
    """Mean 1-5 review score shown as a percentage, None when unrated."""
    if rating is None:
        return None
    return int(round(float(rating) / 5 * 100))


def refresh_honesty_rating(client, profile_id):
    ratings = [
        r[var.col_rating]
        for r in (
            client.table(var.table_reviews)
            .select(var.col_rating)
            .eq(var.col_reviewed_id, profile_id)
            .execute()
            .data or []
        )
    ]
    rating = round(sum(ratings) / len(ratings), 2) if ratings else None

    client.table(var.table_profiles).update({
        var.col_honesty_rating: rating,
        var.col_total_ratings: len(ratings),
    }).eq(var.col_id, profile_id).execute()
    return rating


def profile_stats(client, profile_id):
    convs = []
    for col in (var.col_user1_id, var.col_user2_id):
        convs += (
            client.table(var.table_conversations)
            .select("*")
            .eq(col, profile_id)
            .execute()
            .data or []
        )
    reviews = (
        client.table(var.table_reviews)
        .select(var.col_id)
        .eq(var.col_reviewed_id, profile_id)
        .execute()
        .data or []
    )
    return {
        "matches": len(convs),
        "meetings": sum(1 for c in convs if c.get(var.col_meeting_confirmed)),
        "reviews": len(reviews),
    }
