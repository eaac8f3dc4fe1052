import re
import secrets
import string
import unicodedata

SLUG_MAX_LENGTH = 50
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _random_suffix(k=6):
    return "".join(secrets.choice(string.ascii_lowercase + string.digits) for _ in range(k))


def generate_slug(name):
    """
    Public shop slug from a display name: "Diabaté Sékou" -> "diabate-sekou".
    """
    slug = (name or "").strip().lower()

    # accents: é -> e, ç -> c
    slug = unicodedata.normalize("NFKD", slug)
    slug = "".join(c for c in slug if not unicodedata.combining(c))

    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug).strip("-")

    if len(slug) < 2:
        slug = f"boutique-{_random_suffix()}"

    return slug[:SLUG_MAX_LENGTH].rstrip("-")


def unique_slug(name, exists):
    """
    First free variant of ``generate_slug(name)``: base, base-2, base-3...
    ``exists`` is a callable telling whether a slug is taken. The database
    unique constraint stays the final arbiter.
    """
    base = generate_slug(name)
    candidate = base
    n = 2
    while exists(candidate):
        suffix = f"-{n}"
        candidate = f"{base[:SLUG_MAX_LENGTH - len(suffix)].rstrip('-')}{suffix}"
        n += 1
    return candidate


def is_valid_slug(value):
    return bool(value) and len(value) <= SLUG_MAX_LENGTH and bool(SLUG_PATTERN.match(value))
