STANDARD_CARD_TYPES = {
    "player",
    "team-staff",
    "media",
    "official",
    "tournament-staff",
    "national-team",
}
RARE_CARD_TYPES = {"rare", "super-rare"}

CARD_RARITIES = ("common", "uncommon", "rare", "super-rare")

VALID_ROTATIONS = (0, 90, 180, 270)
OVERLAY_PLACEMENTS = ("belowText", "aboveText")

DEFAULT_NATIONAL_TEAM_NAME = "USA QUADBALL"
RARE_CARD_LABEL = "RARE CARD"
RARE_CARD_DEFAULT_TITLE = "Rare Card"
