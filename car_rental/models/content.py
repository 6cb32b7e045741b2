"""SQLAlchemy models for promotions, editable site content and blog posts."""

from sqlalchemy import TIMESTAMP, Boolean, Column, Date, Integer, String, Text

from car_rental.models.base import Base, new_id
from car_rental.utils.datetime import utc_now


class Promotion(Base):
    """ORM model for a discount code with a validity window."""

    __tablename__ = "promotions"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    code = Column(String, nullable=False, unique=True)
    discount = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    visible = Column(Boolean, nullable=False, default=True)
    type = Column(String, nullable=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class SiteContent(Base):
    """ORM model for a key/value block of marketing copy, grouped by page."""

    __tablename__ = "site_content"

    id = Column(String(36), primary_key=True, default=new_id)
    key = Column(String, nullable=False, unique=True)
    value = Column(Text, nullable=False)
    group = Column(String, nullable=True, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)


class Post(Base):
    """
    ORM model for a bilingual blog article.

    English fields are required; the ``*_ru`` fields carry the Russian
    translation and are published independently via published_ru.
    """

    __tablename__ = "posts"

    id = Column(String(36), primary_key=True, default=new_id)
    slug = Column(String, nullable=False, unique=True)
    slug_ru = Column(String, nullable=True, unique=True)
    title = Column(String, nullable=False)
    title_ru = Column(String, nullable=True)
    summary = Column(Text, nullable=True)
    summary_ru = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    content_ru = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    category = Column(String, nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    published = Column(Boolean, nullable=False, default=False)
    published_ru = Column(Boolean, nullable=False, default=False)
    read_time = Column(Integer, nullable=False, default=1)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now, index=True)
    updated_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utc_now)
