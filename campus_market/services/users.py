from sqlalchemy import select
from sqlalchemy.orm import Session

from campus_market.core.errors import NotFound
from campus_market.models.user import User
from campus_market.schemas.user import UserUpdateIn


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User:
        user = self.db.scalars(select(User).where(User.id == user_id)).first()
        if not user:
            raise NotFound("User not found")
        return user

    def update_profile(self, user: User, data: UserUpdateIn) -> User:
        # non-empty wins: a field can be changed but not cleared
        if data.name:
            parts = data.name.split(" ", 1)
            user.first_name = parts[0]
            if len(parts) > 1:
                user.last_name = parts[1]
        if data.first_name:
            user.first_name = data.first_name
        if data.last_name:
            user.last_name = data.last_name
        if data.phone:
            user.phone = data.phone
        if data.bio:
            user.bio = data.bio
        if data.profile_image:
            user.profile_image = data.profile_image

        self.db.commit()
        self.db.refresh(user)
        return user
