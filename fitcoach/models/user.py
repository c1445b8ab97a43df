"""User account, profile and per-user settings."""
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from fitcoach.db.database import Base
from fitcoach.models.enums import UserRole, UserStatus


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(200), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    profile = relationship("UserProfile", back_populates="user", uselist=False)
    settings = relationship("UserSettings", back_populates="user", uselist=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "status": self.status,
        }


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)

    age = Column(Integer, nullable=True)
    gender = Column(String(50), nullable=True)
    height_cm = Column(Float, nullable=True)
    weight_kg = Column(Float, nullable=True)

    goal = Column(String(200), nullable=False)
    experience_level = Column(String(100), nullable=False)
    days_per_week = Column(Integer, nullable=False)
    preferred_location = Column(String(50), nullable=True)
    available_equipment = Column(JSON, nullable=False, default=list)
    injuries_or_limitations = Column(Text, nullable=True)

    diet_type = Column(String(100), nullable=True)
    allergies = Column(JSON, nullable=False, default=list)
    disliked_foods = Column(JSON, nullable=False, default=list)
    meals_per_day = Column(Integer, nullable=True)
    calorie_target = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="profile")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "age": self.age,
            "gender": self.gender,
            "heightCm": self.height_cm,
            "weightKg": self.weight_kg,
            "goal": self.goal,
            "experienceLevel": self.experience_level,
            "daysPerWeek": self.days_per_week,
            "preferredLocation": self.preferred_location,
            "availableEquipment": list(self.available_equipment or []),
            "injuriesOrLimitations": self.injuries_or_limitations,
            "dietType": self.diet_type,
            "allergies": list(self.allergies or []),
            "dislikedFoods": list(self.disliked_foods or []),
            "mealsPerDay": self.meals_per_day,
            "calorieTarget": self.calorie_target,
            "notes": self.notes,
        }


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    language = Column(String(10), nullable=True)
    units = Column(String(10), nullable=True)
    notifications_enabled = Column(Boolean, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="settings")

    def to_dict(self) -> dict:
        return {
            "language": self.language,
            "units": self.units,
            "notificationsEnabled": self.notifications_enabled,
        }
