"""
Account service: password hashing and user record access
"""

from typing import Optional
from uuid import UUID

from passlib.context import CryptContext
from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import defer

from app.core.exceptions import ConflictError, InternalError
from app.models.user import User

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:
    """Authentication service for user management."""

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plain password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password from database

        Returns:
            bool: True if password matches
        """
        return pwd_context.verify(plain_password, hashed_password)

    @staticmethod
    def get_password_hash(password: str) -> str:
        """
        Hash a password.

        Args:
            password: Plain text password

        Returns:
            str: Hashed password
        """
        return pwd_context.hash(password)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: UUID) -> Optional[User]:
        """
        Get the full user record, credentials included.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            Optional[User]: User if found, None otherwise
        """
        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_identity(db: AsyncSession, user_id: UUID) -> Optional[User]:
        """
        Get a user without loading the password hash or refresh token.

        Args:
            db: Database session
            user_id: User ID

        Returns:
            Optional[User]: User if found, None otherwise
        """
        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .options(defer(User.password), defer(User.refresh_token))
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def find_by_username_or_email(
        db: AsyncSession,
        username: Optional[str] = None,
        email: Optional[str] = None
    ) -> Optional[User]:
        """
        Find a user matching either identifier (case-normalized).

        Args:
            db: Database session
            username: Username to match
            email: Email to match

        Returns:
            Optional[User]: First matching user
        """
        conditions = []
        if username:
            conditions.append(User.username == username.strip().lower())
        if email:
            conditions.append(User.email == email.strip().lower())
        if not conditions:
            return None

        result = await db.execute(select(User).where(or_(*conditions)).limit(1))
        return result.scalars().first()

    @staticmethod
    async def create_user(
        db: AsyncSession,
        fullname: str,
        email: str,
        username: str,
        password: str,
        avatar: str,
        cover_image: Optional[str] = None
    ) -> User:
        """
        Create new user.

        Args:
            db: Database session
            fullname: Display name
            email: Email address
            username: Unique handle
            password: Plain text password, stored hashed
            avatar: Avatar URL
            cover_image: Optional cover image URL

        Returns:
            User: Created user

        Raises:
            ConflictError: If username or email is already taken
        """
        user = User(
            fullname=fullname.strip(),
            email=email.strip().lower(),
            username=username.strip().lower(),
            password=AuthService.get_password_hash(password),
            avatar=avatar,
            cover_image=cover_image,
            watch_history=[]
        )

        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("User with email or username already exists")

        created = await AuthService.get_identity(db, user.id)
        if not created:
            raise InternalError("Something went wrong while registering the user")
        return created

    @staticmethod
    async def update_password(db: AsyncSession, user_id: UUID, new_password: str) -> None:
        """
        Update user password.

        Args:
            db: Database session
            user_id: User ID
            new_password: New plain text password
        """
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(password=AuthService.get_password_hash(new_password))
        )
        await db.commit()

    @staticmethod
    async def update_user(db: AsyncSession, user_id: UUID, **values) -> User:
        """
        Update profile columns and return the refreshed identity.

        Args:
            db: Database session
            user_id: User ID
            **values: Column values to set

        Returns:
            User: Updated user

        Raises:
            ConflictError: If a unique column clashes with another user
        """
        try:
            await db.execute(
                update(User)
                .where(User.id == user_id)
                .values(**values)
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Email is already in use")

        result = await db.execute(
            select(User)
            .where(User.id == user_id)
            .options(defer(User.password), defer(User.refresh_token))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()
