# database/db_manager.py
from flask_sqlalchemy import SQLAlchemy
import os  # Import os for path handling
import logging
from datetime import datetime, timezone
from sqlalchemy import ForeignKey, CheckConstraint
from sqlalchemy.engine import make_url
from sqlalchemy.orm import relationship

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)

REQUEST_STATUSES = ('pending', 'played', 'skipped')


def utcnow() -> datetime:
    # Naive UTC; SQLite drops tzinfo anyway
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class Event(db.Model):
    __tablename__ = 'events'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    venue = db.Column(db.String(255), nullable=False)
    dj_name = db.Column(db.String(255), nullable=False, default='')
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    entry_code = db.Column(db.String(64), nullable=False, default='')  # Code attendees type to reach the event
    request_price = db.Column(db.Integer, nullable=False, default=500)  # Cents
    image_url = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    requests = relationship(
        'SongRequest',
        back_populates='event',
        order_by='SongRequest.id',
        cascade='all, delete-orphan',
        lazy=True,
    )

    def __repr__(self):
        return f'<Event {self.id}: {self.name} @ {self.venue}>'

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'venue': self.venue,
            'djName': self.dj_name,
            'startTime': _iso(self.start_time),
            'endTime': _iso(self.end_time),
            'isActive': self.is_active,
            'entryCode': self.entry_code,
            'requestPrice': self.request_price,
            'imageUrl': self.image_url,
            'createdAt': _iso(self.created_at),
        }


class SongRequest(db.Model):
    __tablename__ = 'song_requests'

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(
        db.Integer,
        ForeignKey('events.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    song_name = db.Column(db.String(255), nullable=False)
    artist_name = db.Column(db.String(255), nullable=False)
    requester_name = db.Column(db.String(255), nullable=False)
    wishes = db.Column(db.Text, nullable=False, default='')  # Message to the DJ
    amount = db.Column(db.Integer, nullable=False)  # Cents paid
    status = db.Column(db.String(16), nullable=False, default='pending', index=True)
    request_time = db.Column(db.DateTime, default=utcnow, nullable=False)
    played_time = db.Column(db.DateTime, nullable=True)

    event = relationship('Event', back_populates='requests')

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'played', 'skipped')",
            name='ck_song_requests_status',
        ),
    )

    def __repr__(self):
        return f'<SongRequest {self.id}: {self.song_name} - {self.artist_name} [{self.status}]>'

    def to_dict(self) -> dict:
        """Dashboard wire shape of a request."""
        return {
            'id': self.id,
            'eventId': self.event_id,
            'songName': self.song_name,
            'artistName': self.artist_name,
            'requesterName': self.requester_name,
            'wishes': self.wishes,
            'amount': self.amount,
            'status': self.status,
            'requestTime': _iso(self.request_time),
            'playedTime': _iso(self.played_time),
        }


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    # Create database tables within the application context
    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
