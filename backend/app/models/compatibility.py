from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
from app.core.database import Base

# The version table only ever holds this row
VERSION_ROW_ID = 1
INITIAL_VERSION = 1


class CompatibilityEntry(Base):
    """One chemical and its ordered list of metal compatibility verdicts."""
    __tablename__ = "compatibility_entries"

    id = Column(Integer, primary_key=True, index=True)
    # Trimmed and uppercased before it reaches the database
    chemical_name = Column(String(100), unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    compatibilities = relationship(
        "CompatibilityPair",
        back_populates="entry",
        order_by="CompatibilityPair.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class CompatibilityPair(Base):
    __tablename__ = "compatibility_pairs"
    __table_args__ = (
        UniqueConstraint("entry_id", "metal_id", name="uq_compatibility_pairs_entry_metal"),
    )

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("compatibility_entries.id", ondelete="CASCADE"), nullable=False, index=True)
    metal_id = Column(Integer, ForeignKey("metals.id"), nullable=False, index=True)
    is_compatible = Column(Boolean, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    entry = relationship("CompatibilityEntry", back_populates="compatibilities")
    metal = relationship("Metal", lazy="joined")


class CompatibilityVersion(Base):
    """Single-row global change counter for the compatibility matrix."""
    __tablename__ = "compatibility_versions"

    id = Column(Integer, primary_key=True)
    version = Column(Integer, nullable=False, default=INITIAL_VERSION)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
