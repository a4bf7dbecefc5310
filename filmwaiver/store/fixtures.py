"""Static discount fixtures served when no live source is configured."""
from filmwaiver.parse.models import DiscountRecord, utcnow

SOURCE_TAG = "fixture"

_LOADED_AT = utcnow()

_FIXTURE_ROWS = [
    ("Sundance Film Festival", "SUNDANCE25", "25% OFF submission fees", "sundancefilmfestival"),
    ("Tribeca Festival", "TRIBECA20", "20% OFF regular deadline", "tribecafilmfestival"),
    ("SXSW Film & TV Festival", "SXSW15OFF", "$15 OFF feature submissions", "sxsw"),
    ("Slamdance Film Festival", "SLAM2025", "Waived fee for first-time filmmakers", "slamdance"),
    ("Austin Film Festival", "AFF10SAVE", "$10 OFF screenplay and film entries", "austinfilmfestival"),
    ("Palm Springs International ShortFest", "PSSF30", "30% OFF short film submissions", "palmspringsshortfest"),
    ("Raindance Film Festival", "RAIN2025", "Free submission for student films", "raindancefilmfestival"),
    ("LA Shorts International Film Festival", "LASHORTS15", "15% OFF all categories", "lashortsfest"),
    ("Cleveland International Film Festival", "CIFF50", "50% OFF late deadline", "clevelandfilm"),
    ("Atlanta Film Festival", "ATLFF20", "20% OFF early bird deadline", "atlantafilmfestival"),
]

STATIC_DISCOUNTS: tuple[DiscountRecord, ...] = tuple(
    DiscountRecord(
        festival_name=name,
        code=code,
        offer=offer,
        url=f"https://filmfreeway.com/{slug}",
        source=SOURCE_TAG,
        scraped_at=_LOADED_AT,
    )
    for name, code, offer, slug in _FIXTURE_ROWS
)
