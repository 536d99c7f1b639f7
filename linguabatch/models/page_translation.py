"""Page translation model: the translated copy of a whole page per locale."""

import json
from datetime import datetime, timedelta

from linguabatch import db


class PageTranslation(db.Model):
    """Translated content blocks of one page in one locale."""

    __tablename__ = 'page_translations'

    id = db.Column(db.Integer, primary_key=True)
    path = db.Column(db.String(255), nullable=False, index=True)
    locale = db.Column(db.String(5), nullable=False)

    # JSON object: content key -> translated text
    content = db.Column(db.Text, nullable=False, default='{}')

    last_updated = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.UniqueConstraint('path', 'locale', name='unique_page_locale'),
    )

    def __repr__(self):
        return f'<PageTranslation {self.path} [{self.locale}]>'

    def get_content(self) -> dict:
        try:
            data = json.loads(self.content or '{}')
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def set_content(self, content: dict):
        self.content = json.dumps(content, ensure_ascii=False)

    def is_expired(self, ttl_seconds: float, now: datetime = None) -> bool:
        now = now or datetime.utcnow()
        return self.last_updated < now - timedelta(seconds=ttl_seconds)
