"""
Sponsor pool and leaderboard exclusions for the current rewards round.
"""

ACTIVE_SPONSORS = [
    {"id": "purple", "name": "Purple", "handle": "@purple", "amount": 4538},
    {"id": "base", "name": "Base", "handle": "@base", "amount": 2500},
    {"id": "walletconnect", "name": "WalletConnect", "handle": "@walletconnect", "amount": 2500},
    {"id": "talent", "name": "Talent Protocol", "handle": "@talent", "amount": 2500},
    {"id": "efp", "name": "EFP", "handle": "@efp", "amount": 1350},
    {"id": "phi", "name": "Phi", "handle": "@phi", "amount": 1250},
    {"id": "noice", "name": "Noice", "handle": "@noiceapp", "amount": 1250},
    {"id": "web3bio", "name": "Web3.bio", "handle": "@web3bio", "amount": 1200},
    {"id": "fireflyapp", "name": "Firefly App", "handle": "@fireflyapp", "amount": 1200},
]

TOTAL_SPONSORS_POOL = sum(s["amount"] for s in ACTIVE_SPONSORS)

# Project accounts never appear on the creator leaderboard
PROJECT_ACCOUNTS_TO_EXCLUDE = frozenset(
    {
        "cf0a0516-b68c-49a5-b17e-4bf9361535b7",  # moonwell
        "20d5bcc9-88c2-40ae-965d-9c857b9ce9d7",  # talent
        "887c2f4e-2d15-4f0d-ba69-fcef946a7002",  # base.base.eth
        "4217c910-9179-4d77-b4c6-eff8be5d8c02",  # cooprecs
        "aa08b53c-622f-49f0-ba70-46bb1dabcfc1",  # matchaxyz
        "09b20fc9-a28d-4477-8103-f9f195ec76b1",  # rainbow
        "1b04461c-0160-487e-8022-d2b59d4a05ec",  # walletconnect
        "e6892c35-0c8c-4b91-9e57-b894345bedbd",  # dune.eth
        "f3cba5f4-6eb8-485d-815b-5775619a22bb",  # drakula
        "1e8eec23-d32d-4f64-bdc4-4a46a0ff8fa4",  # daylightenergy
        "b4405975-e209-4f3c-b5b4-7f83a1a652c3",  # interface
        "a2609b4d-1b19-4d50-87b2-f415d85535a9",  # doodles
        "1a80750b-e221-459f-a69b-33de1f0a6fdf",  # SUPERMARKET
        "e917fec7-2278-4ee8-9274-d5a680abe098",  # Reveel
        "587afa70-4d48-44c5-8332-c651c04d4894",  # Zerion
        "77690046-ff9e-4077-be99-15c1e98b1624",  # Daylight
        "b9db4924-4c8d-4434-bd5d-f8f517775ab9",  # Zora
    }
)

CREATOR_SCORE_SLUG = "creator_score"
CREATOR_SCORER = "Creator Score"

# Credentials that grant the token holder boost
BOOST_CREDENTIAL_SLUGS = ("talent_protocol_talent_holder", "talent_vault")

# Cache keys and tags
CACHE_KEY_TOP_ENTRIES = "leaderboard-top-entries"
CACHE_KEY_BOOSTED = "boosted-profiles"
CACHE_KEY_DECISIONS = "rewards-decisions"
CACHE_TAG_LEADERBOARD = "leaderboard"
