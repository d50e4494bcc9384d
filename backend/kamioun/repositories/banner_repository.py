"""
Banner Repository
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from kamioun.models import Banner


class BannerRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[Banner]:
        return self.db.query(Banner).order_by(Banner.created_at.desc()).all()

    def find_by_id(self, banner_id: str) -> Optional[Banner]:
        return self.db.query(Banner).filter(Banner.id == banner_id).first()

    def add(self, banner: Banner) -> Banner:
        self.db.add(banner)
        self.db.flush()
        return banner

    def delete(self, banner: Banner) -> None:
        self.db.delete(banner)
        self.db.flush()
