####################################################### table names
table_profiles      = "profiles"
table_likes         = "likes"
table_dislikes      = "dislikes"
table_conversations = "conversations"
table_messages      = "messages"
table_meetings      = "meetings"
table_reviews       = "reviews"
table_bot_queue     = "bot_response_queue"
table_typing        = "typing_indicators"


####################################################### shared column names
col_id         = "id"
col_user_id    = "user_id"
col_created_at = "created_at"
col_updated_at = "updated_at"


####################################################### profiles column names
col_name           = "name"
col_age            = "age"
col_city           = "city"
col_phone          = "phone"
col_gender         = "gender"
col_looking_for    = "looking_for"
col_about_me       = "about_me"
col_values         = "values"
col_family_goals   = "family_goals"
col_children       = "children"
col_smoking        = "smoking"
col_alcohol        = "alcohol"
col_zodiac_sign    = "zodiac_sign"
col_photo_url      = "photo_url"
col_photos         = "photos"
col_honesty_rating = "honesty_rating"
col_total_ratings  = "total_ratings"
col_is_bot         = "is_bot"


####################################################### likes / dislikes column names
col_liked_user_id    = "liked_user_id"
col_disliked_user_id = "disliked_user_id"


####################################################### conversations column names
col_user1_id                   = "user1_id"
col_user2_id                   = "user2_id"
col_meeting_requested_by_user1 = "meeting_requested_by_user1"
col_meeting_requested_by_user2 = "meeting_requested_by_user2"
col_meeting_confirmed          = "meeting_confirmed"
col_meeting_date               = "meeting_date"
col_ready_for_meeting          = "ready_for_meeting"


####################################################### messages column names
col_conversation_id = "conversation_id"
col_sender_id       = "sender_id"
col_content         = "content"


####################################################### meetings column names
col_confirmed_by_user1 = "confirmed_by_user1"
col_confirmed_by_user2 = "confirmed_by_user2"


####################################################### reviews column names
col_reviewer_id = "reviewer_id"
col_reviewed_id = "reviewed_id"
col_rating      = "rating"
col_comment     = "comment"


####################################################### bot queue column names
col_bot_id       = "bot_id"
col_message_id   = "message_id"
col_scheduled_at = "scheduled_at"
col_processed    = "processed"


####################################################### typing indicator column names
col_is_typing = "is_typing"


####################################################### storage
bucket_photos       = "profile-photos"
max_photos          = 9
max_photo_bytes     = 10 * 1024 * 1024
allowed_photo_types = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/heic",
    "image/heif",
)


####################################################### bots
bot_email_domain = "@dating.bot"


####################################################### choice values
genders        = ["male", "female"]
smoking_values = ["smoke", "not_smoke", "neutral"]
alcohol_values = ["drink", "not_drink", "sometimes"]
children_values = ["yes", "no", "not_say"]
zodiac_signs   = [
    "Aries", "Taurus", "Gemini", "Cancer", "Leo", "Virgo",
    "Libra", "Scorpio", "Sagittarius", "Capricorn", "Aquarius", "Pisces",
]
