import base64
import json
import logging
import time

import httpx
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import FIREBASE_PROJECT_ID
from .database import get_db
from .models import Business, User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

# Roles allowed to manage a business (settings, staff, services)
MANAGER_ROLES = ("admin", "owner")
DASHBOARD_ROLES = ("admin", "owner", "staff")

# Cache for Google's public keys
_cached_keys = None


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


async def get_google_public_keys(force_refresh: bool = False):
    """Fetch Google's x509 certificates used to sign Firebase ID tokens"""
    global _cached_keys
    if _cached_keys and not force_refresh:
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_CERTS_URL)
        if response.status_code == 200:
            _cached_keys = response.json()
            logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
            return _cached_keys
        logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token.

    Checks the RS256 signature against Google's certificates, then the
    audience, issuer, expiry, issued-at and auth_time claims.
    """
    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise HTTPException(status_code=401, detail="Invalid token format")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64url_decode(header_b64))
        signature = _b64url_decode(signature_b64)
        claims = json.loads(_b64url_decode(payload_b64))
    except (ValueError, TypeError) as e:
        logger.error(f"❌ Failed to decode token: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token") from e

    if header.get("alg") != "RS256":
        logger.error(f"❌ Invalid token algorithm: {header.get('alg')}")
        raise HTTPException(status_code=401, detail="Invalid token algorithm")
    kid = header.get("kid")
    if not kid:
        raise HTTPException(status_code=401, detail="Token missing key ID")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        # Google rotates keys; refresh once before giving up
        logger.warning(f"⚠️ Key ID {kid} not cached, refreshing Google public keys")
        public_keys = await get_google_public_keys(force_refresh=True)
        if not public_keys or kid not in public_keys:
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    cert = load_pem_x509_certificate(public_keys[kid].encode())
    try:
        cert.public_key().verify(
            signature,
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except Exception as e:
        logger.error(f"❌ Token signature verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    if claims.get("aud") != FIREBASE_PROJECT_ID:
        raise HTTPException(status_code=401, detail="Invalid token audience")
    if claims.get("iss") != f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}":
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    now = time.time()
    if claims.get("exp", 0) < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )
    if claims.get("iat", 0) > now + 60:  # 60 seconds clock skew
        logger.warning("⚠️ Token issued in the future")
        raise HTTPException(status_code=401, detail="Invalid token")
    if "auth_time" not in claims:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    return claims


def resolve_user(db: Session, firebase_uid: str, email: str | None, name: str = "") -> User:
    """
    Find the user for a verified token.

    Invited staff exist as rows without a firebase_uid; the first sign-in with
    the invited email links the account. Unknown users are created as owners.
    """
    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if user:
        return user

    if email:
        existing = db.query(User).filter(User.email == email.lower()).first()
        if existing:
            logger.info(f"🔄 Linking Firebase UID to existing user {existing.email}")
            existing.firebase_uid = firebase_uid
            if name and not existing.full_name:
                existing.full_name = name
            db.commit()
            db.refresh(existing)
            return existing

    logger.info(f"🆕 Creating new user: {email}")
    user = User(firebase_uid=firebase_uid, email=(email or "").lower(), full_name=name, role="owner")
    db.add(user)
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        if "unique" in str(e).lower() or "duplicate key" in str(e).lower():
            raise HTTPException(
                status_code=409,
                detail="This email is already registered. Please sign in with your existing account.",
            ) from e
        raise
    db.refresh(user)
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from Firebase token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    claims = await verify_firebase_token(credentials.credentials)
    firebase_uid = claims.get("sub") or claims.get("user_id") or claims.get("uid")
    if not firebase_uid:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(claims.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = resolve_user(db, firebase_uid, claims.get("email"), claims.get("name", ""))
    logger.debug(f"✅ User authenticated: {user.email}")
    return user


def find_user_business(db: Session, user: User) -> Business | None:
    """Owners reach their business through owner_id, staff through business_id"""
    if user.business_id:
        business = db.query(Business).filter(Business.id == user.business_id).first()
        if business:
            return business
    return db.query(Business).filter(Business.owner_id == user.id).first()


async def get_current_business(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Business:
    """Business the caller works for; 404 until onboarding has created one"""
    if user.role not in DASHBOARD_ROLES:
        raise HTTPException(status_code=403, detail="Access denied")
    business = find_user_business(db, user)
    if not business:
        raise HTTPException(status_code=404, detail="Business not found")
    return business


async def require_manager(user: User = Depends(get_current_user)) -> User:
    """Only admins and owners may manage staff and settings"""
    if user.role not in MANAGER_ROLES:
        logger.warning(f"⚠️ User {user.email} with role {user.role} attempted a manager action")
        raise HTTPException(status_code=403, detail="Only admins and owners can do this")
    return user
