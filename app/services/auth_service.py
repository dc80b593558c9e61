from typing import Optional
import logging
import uuid
from sqlalchemy import select, delete, or_, func
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool
from app.database.connection import AsyncSessionLocal
from app.models import User, Session, Property, Rating, Favorite, Complaint
from app.models.enums import UserRole, SELF_REGISTER_ROLES
from app.services.errors import ConflictError
from app.services.serializers import user_to_dict, verification_to_dict, agent_profile_to_dict
from app.utils.security import verify_password, get_password_hash, create_access_token, token_expiry
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


async def register_user(
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    phone: Optional[str] = None,
    role: Optional[str] = None,
) -> dict:
    """Register a new marketplace user (client, landlord or agent)"""
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    email = email.lower()
    # Admin roles can never be self-assigned
    try:
        requested_role = UserRole(role) if role else UserRole.CLIENT
    except ValueError:
        requested_role = UserRole.CLIENT
    if requested_role not in SELF_REGISTER_ROLES:
        requested_role = UserRole.CLIENT

    async with AsyncSessionLocal() as session:
        conditions = [User.email == email]
        if phone:
            conditions.append(User.phone == phone)
        stmt = select(User).where(or_(*conditions))
        result = await session.execute(stmt)
        existing_user = result.scalars().first()

        if existing_user:
            if existing_user.email == email:
                raise ConflictError("Email is already in use")
            raise ConflictError("Phone number is already in use")

        new_user = User(
            id=str(uuid.uuid4()),
            email=email,
            hashed_password=await run_in_threadpool(get_password_hash, password),
            first_name=first_name,
            last_name=last_name,
            phone=phone or None,
            role=requested_role,
        )

        session.add(new_user)
        await session.commit()
        await session.refresh(new_user)

        logger.info(f"Registered user {new_user.id} with role {requested_role.value}")
        return user_to_dict(new_user)


async def login_user(email: str, password: str) -> Optional[dict]:
    """Verify credentials, open a session row and return the user with a token"""
    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == email.lower())
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user or not await run_in_threadpool(verify_password, password, user.hashed_password):
            return None

        expires_at = token_expiry()
        token = create_access_token(
            data={"sub": user.id, "role": user.role.value},
            expires_at=expires_at,
        )

        session.add(Session(
            id=str(uuid.uuid4()),
            user_id=user.id,
            token=token,
            expires_at=expires_at,
        ))
        user.last_login = utcnow()

        await session.commit()
        await session.refresh(user)

        return {"user": user_to_dict(user), "token": token}


async def logout_user(token: str) -> None:
    async with AsyncSessionLocal() as session:
        await session.execute(delete(Session).where(Session.token == token))
        await session.commit()


async def get_session_user(token: str) -> Optional[dict]:
    """Resolve a bearer token to its user while the session is still live"""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(User)
            .join(Session, Session.user_id == User.id)
            .where(Session.token == token, Session.expires_at > utcnow())
        )
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            return None

        return user_to_dict(user)


async def get_user_profile(user_id: str) -> Optional[dict]:
    """Profile with verification info, agent profile and activity counts"""
    async with AsyncSessionLocal() as session:
        stmt = (
            select(User)
            .where(User.id == user_id)
            .options(selectinload(User.verification_info), selectinload(User.agent_profile))
        )
        result = await session.execute(stmt)
        user = result.scalar_one_or_none()

        if not user:
            return None

        counts = await _user_activity_counts(session, user_id)

        profile = user_to_dict(user)
        profile["verification_info"] = verification_to_dict(user.verification_info)
        profile["agent_profile"] = agent_profile_to_dict(user.agent_profile)
        profile["counts"] = counts
        return profile


async def _user_activity_counts(session, user_id: str) -> dict:
    stmt = select(
        select(func.count(Property.id)).where(Property.posted_by_id == user_id).scalar_subquery().label("properties_posted"),
        select(func.count(Property.id)).where(Property.managed_by_agent_id == user_id).scalar_subquery().label("properties_managed"),
        select(func.count(Rating.id)).where(Rating.client_id == user_id).scalar_subquery().label("ratings"),
        select(func.count(Favorite.id)).where(Favorite.user_id == user_id).scalar_subquery().label("favorites"),
        select(func.count(Complaint.id)).where(Complaint.client_id == user_id).scalar_subquery().label("complaints"),
    )
    row = (await session.execute(stmt)).one()
    return {key: int(value or 0) for key, value in row._mapping.items()}


async def update_user_profile(user_id: str, update_data: dict) -> Optional[dict]:
    """Update own profile; phone numbers must stay unique"""
    async with AsyncSessionLocal() as session:
        phone = update_data.get("phone")
        if phone:
            stmt = select(User.id).where(User.phone == phone, User.id != user_id)
            if (await session.execute(stmt)).first():
                raise ConflictError("Phone number is already in use")

        user = await session.get(User, user_id)
        if not user:
            return None

        if update_data.get("first_name"):
            user.first_name = update_data["first_name"]
        if update_data.get("last_name"):
            user.last_name = update_data["last_name"]
        # Explicit empty values clear optional fields
        if "phone" in update_data:
            user.phone = phone or None
        if "avatar_url" in update_data:
            user.avatar_url = update_data["avatar_url"] or None

        await session.commit()
        await session.refresh(user)
        return user_to_dict(user)


async def change_password(user_id: str, current_password: str, new_password: str) -> bool:
    """Change password and invalidate every session of the user"""
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"New password must be at least {MIN_PASSWORD_LENGTH} characters long")

    async with AsyncSessionLocal() as session:
        user = await session.get(User, user_id)
        if not user:
            return False

        if not await run_in_threadpool(verify_password, current_password, user.hashed_password):
            raise ValueError("Current password is incorrect")

        user.hashed_password = await run_in_threadpool(get_password_hash, new_password)
        await session.execute(delete(Session).where(Session.user_id == user_id))
        await session.commit()

        logger.info(f"Password changed for user {user_id}; sessions revoked")
        return True
