from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from ..platform.database import Base


class RoleFamily(Base):
    __tablename__ = "role_families"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)

    dimensions = relationship(
        "RoleFamilyDimension",
        back_populates="role_family",
        order_by="RoleFamilyDimension.sort_order",
        cascade="all, delete-orphan",
    )
    red_flags = relationship("RubricRedFlag", back_populates="role_family", cascade="all, delete-orphan")


class RubricDimension(Base):
    __tablename__ = "rubric_dimensions"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    is_universal = Column(Boolean, default=False, nullable=False)

    levels = relationship("RubricLevel", back_populates="dimension", cascade="all, delete-orphan")


class RoleFamilyDimension(Base):
    __tablename__ = "role_family_dimensions"
    __table_args__ = (
        UniqueConstraint("role_family_id", "dimension_id", name="uq_role_family_dimension"),
    )

    id = Column(Integer, primary_key=True, index=True)
    role_family_id = Column(Integer, ForeignKey("role_families.id", ondelete="CASCADE"), index=True, nullable=False)
    dimension_id = Column(Integer, ForeignKey("rubric_dimensions.id", ondelete="CASCADE"), index=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    role_family = relationship("RoleFamily", back_populates="dimensions")
    dimension = relationship("RubricDimension")


class RubricLevel(Base):
    __tablename__ = "rubric_levels"
    __table_args__ = (
        UniqueConstraint("dimension_id", "role_family_id", "level", name="uq_rubric_level_override"),
    )

    id = Column(Integer, primary_key=True, index=True)
    dimension_id = Column(Integer, ForeignKey("rubric_dimensions.id", ondelete="CASCADE"), index=True, nullable=False)
    # NULL = default level shared by every role family
    role_family_id = Column(Integer, ForeignKey("role_families.id", ondelete="CASCADE"), nullable=True)
    level = Column(Integer, nullable=False)
    label = Column(String, nullable=False)
    pattern = Column(Text, nullable=False)
    evidence = Column(JSON, nullable=False, default=list)

    dimension = relationship("RubricDimension", back_populates="levels")


class RubricRedFlag(Base):
    __tablename__ = "rubric_red_flags"

    id = Column(Integer, primary_key=True, index=True)
    role_family_id = Column(Integer, ForeignKey("role_families.id", ondelete="CASCADE"), index=True, nullable=False)
    slug = Column(String, nullable=False)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")

    role_family = relationship("RoleFamily", back_populates="red_flags")
