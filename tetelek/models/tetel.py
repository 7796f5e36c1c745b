"""Study item (tétel) model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from tetelek.database import Base


class Tetel(Base):
    """Represents a study item."""
    __tablename__ = "tetel"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)


class Section(Base):
    """A markdown section of a study item."""
    __tablename__ = "section"

    id = Column(Integer, primary_key=True)
    tetel_id = Column(Integer, ForeignKey("tetel.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    content = Column(Text, nullable=False, default="")


class Subsection(Base):
    __tablename__ = "subsection"

    id = Column(Integer, primary_key=True)
    section_id = Column(Integer, ForeignKey("section.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    title = Column(Text)
    description = Column(Text)


class Osszegzes(Base):
    """Optional summary of a study item."""
    __tablename__ = "osszegzes"

    id = Column(Integer, primary_key=True)
    tetel_id = Column(Integer, ForeignKey("tetel.id"), nullable=False, unique=True)
    content = Column(Text)
