from datetime import datetime, timezone

from arena import db


def _utcnow():
    return datetime.now(timezone.utc)


class User(db.Model):
    __tablename__ = 'user'
    # Identity is issued by the auth provider; stored as-is
    id = db.Column(db.String(64), primary_key=True)
    username = db.Column(db.String(64), nullable=False, index=True)
    is_online = db.Column(db.Boolean, default=False, nullable=False)
    games_played = db.Column(db.Integer, default=0, nullable=False)
    total_score = db.Column(db.Integer, default=0, nullable=False)
    multiplayer_games = db.Column(db.Integer, default=0, nullable=False)
    multiplayer_wins = db.Column(db.Integer, default=0, nullable=False)
    scores = db.relationship('GameScore', back_populates='user', lazy='dynamic')

    @classmethod
    def get_or_create(cls, user_id, username):
        user = db.session.get(cls, user_id)
        if user is None:
            user = cls(id=user_id, username=username or user_id, is_online=False,
                       games_played=0, total_score=0, multiplayer_games=0, multiplayer_wins=0)
            db.session.add(user)
        return user

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'isOnline': self.is_online,
            'stats': {
                'gamesPlayed': self.games_played,
                'totalScore': self.total_score,
                'multiplayerGames': self.multiplayer_games,
                'multiplayerWins': self.multiplayer_wins,
            },
        }


class GameScore(db.Model):
    __tablename__ = 'game_score'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), db.ForeignKey('user.id'), nullable=False, index=True)
    game_type = db.Column(db.String(32), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    is_multiplayer = db.Column(db.Boolean, default=False, nullable=False)
    is_winner = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    user = db.relationship('User', back_populates='scores')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'gameType': self.game_type,
            'score': self.score,
            'isMultiplayer': self.is_multiplayer,
            'isWinner': self.is_winner,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


def submit_score(user_id, username, game_type, score, is_multiplayer=False, is_winner=False):
    """Insert a score row and roll it into the user's stats."""
    user = User.get_or_create(user_id, username)
    entry = GameScore(user_id=user.id, game_type=game_type, score=score,
                      is_multiplayer=is_multiplayer, is_winner=is_winner)
    db.session.add(entry)
    user.games_played += 1
    user.total_score += score
    if is_multiplayer:
        user.multiplayer_games += 1
        if is_winner:
            user.multiplayer_wins += 1
    db.session.commit()
    return entry


def set_online_status(user_id, username, online):
    user = User.get_or_create(user_id, username)
    user.is_online = online
    db.session.commit()
    return user
