"""SQLAlchemy mapping of the parts of Bear's database that we read.

Bear's schema is a Core Data store and is owned by the Bear app. These models
only describe it for query building; this package never creates, alters or
writes to the real database. ``Base.metadata.create_all`` is only used to
build throwaway stores in tests.
"""
from sqlalchemy import Column, Float, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import declarative_base

# Create base class for SQLAlchemy models
Base = declarative_base()

# Core Data join table between notes and tags (keyed by internal Z_PK ids)
note_tags = Table(
    "Z_5TAGS",
    Base.metadata,
    Column("Z_5NOTES", Integer, ForeignKey("ZSFNOTE.Z_PK"), primary_key=True),
    Column("Z_13TAGS", Integer, ForeignKey("ZSFNOTETAG.Z_PK"), primary_key=True),
)


class DBNote(Base):
    """Database model for a Bear note."""
    __tablename__ = "ZSFNOTE"
    pk = Column("Z_PK", Integer, primary_key=True)
    unique_identifier = Column("ZUNIQUEIDENTIFIER", String, unique=True)
    title = Column("ZTITLE", String)
    text = Column("ZTEXT", Text)
    # Seconds since 2001-01-01 UTC
    creation_date = Column("ZCREATIONDATE", Float)
    modification_date = Column("ZMODIFICATIONDATE", Float)
    trashed = Column("ZTRASHED", Integer, default=0)
    archived = Column("ZARCHIVED", Integer, default=0)

    def __repr__(self) -> str:
        """Return string representation of note."""
        return f"<Note(id='{self.unique_identifier}', title='{self.title}')>"


class DBTag(Base):
    """Database model for a Bear tag."""
    __tablename__ = "ZSFNOTETAG"
    pk = Column("Z_PK", Integer, primary_key=True)
    title = Column("ZTITLE", String)

    def __repr__(self) -> str:
        """Return string representation of tag."""
        return f"<Tag(pk={self.pk}, name='{self.title}')>"
