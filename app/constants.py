# Review tags. Keep in sync with the tag selector groups below.
VALID_TAGS = (
    "甘口",
    "辛口",
    "濃醇",
    "淡麗",
    "酸味",
    "旨味",
    "熟成",
    "苦味",
    "渋味",
    "にごり",
    "発泡",
)

# Pairs where selecting one tag deselects the other (client side only)
EXCLUSIVE_TAG_GROUPS = (
    ("甘口", "辛口"),
    ("濃醇", "淡麗"),
)

SAKE_CATEGORIES = ("清酒", "リキュール", "みりん", "その他")
DEFAULT_CATEGORY = "清酒"

USER_NAME_MAX_LENGTH = 50
SAKE_NAME_MAX_LENGTH = 100
SAKE_TYPE_MAX_LENGTH = 50
NOTE_MAX_LENGTH = 500

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
