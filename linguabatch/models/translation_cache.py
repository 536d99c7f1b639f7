"""Translation cache model for storing translated strings server-side."""
import hashlib
from datetime import datetime

from linguabatch import db


def get_text_hash(text: str) -> str:
    """Generate a hash for the text to use in the cache key."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()[:32]  # Shorter hash is fine


def make_doc_id(text: str, source_lang: str, target_lang: str) -> str:
    """Composite cache key: ``{from}_{to}_{hash(text)}``."""
    return f'{source_lang}_{target_lang}_{get_text_hash(text)}'


class TranslationCache(db.Model):
    """Cache translations to avoid re-translating the same text."""
    __tablename__ = 'translation_cache'

    id = db.Column(db.Integer, primary_key=True)
    doc_id = db.Column(db.String(80), nullable=False, unique=True, index=True)
    source_lang = db.Column(db.String(5), nullable=False)
    target_lang = db.Column(db.String(5), nullable=False, index=True)
    original_text = db.Column(db.Text, nullable=False)
    translated_text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f'<TranslationCache {self.source_lang}->{self.target_lang} {self.doc_id}>'
