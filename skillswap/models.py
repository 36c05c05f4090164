from datetime import datetime, timezone
from skillswap import db

AVAILABILITY_OPTIONS = ('weekends', 'evenings', 'weekdays', 'flexible')

STATUS_PENDING = 'pending'
STATUS_ACCEPTED = 'accepted'
STATUS_REJECTED = 'rejected'
STATUS_COMPLETED = 'completed'
SWAP_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED, STATUS_REJECTED, STATUS_COMPLETED)

# Legal swap request status transitions; anything not listed is rejected
SWAP_TRANSITIONS = {
    STATUS_PENDING: {STATUS_ACCEPTED, STATUS_REJECTED},
    STATUS_ACCEPTED: {STATUS_COMPLETED},
    STATUS_REJECTED: set(),
    STATUS_COMPLETED: set(),
}


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(255), primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=True)
    first_name = db.Column(db.String(255), nullable=True)
    last_name = db.Column(db.String(255), nullable=True)
    profile_image_url = db.Column(db.String(1024), nullable=True)
    custom_profile_image = db.Column(db.String(1024), nullable=True)
    location = db.Column(db.String(255), nullable=True)
    availability = db.Column(db.String(20), nullable=False, default='weekends')
    is_public = db.Column(db.Boolean, nullable=False, default=True)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    @property
    def display_image(self):
        """The custom upload wins over the identity provider's picture."""
        return self.custom_profile_image or self.profile_image_url

    def summary(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'profileImageUrl': self.display_image,
        }

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'profileImageUrl': self.profile_image_url,
            'customProfileImage': self.custom_profile_image,
            'location': self.location,
            'availability': self.availability,
            'isPublic': self.is_public,
            'isAdmin': self.is_admin,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<User {self.id}>"


class Skill(db.Model):
    __tablename__ = 'skills'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    category = db.Column(db.String(255), nullable=True)
    # False once an admin rejects the skill; rows are kept for swap history
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
        }

    def __repr__(self):
        return f"<Skill {self.name}>"


# Skill names are unique regardless of case
db.Index('uq_skills_name_lower', db.func.lower(Skill.name), unique=True)


class UserSkillOffered(db.Model):
    __tablename__ = 'user_skills_offered'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'skill_id', name='unique_user_skill_offered'),
    )


class UserSkillWanted(db.Model):
    __tablename__ = 'user_skills_wanted'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    skill_id = db.Column(db.Integer, db.ForeignKey('skills.id', ondelete='CASCADE'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('user_id', 'skill_id', name='unique_user_skill_wanted'),
    )


class SwapRequest(db.Model):
    __tablename__ = 'swap_requests'

    id = db.Column(db.Integer, primary_key=True)
    requester_id = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False, index=True)
    recipient_id = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False, index=True)
    offered_skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
    wanted_skill_id = db.Column(db.Integer, db.ForeignKey('skills.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)
    message = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'requesterId': self.requester_id,
            'recipientId': self.recipient_id,
            'offeredSkillId': self.offered_skill_id,
            'wantedSkillId': self.wanted_skill_id,
            'status': self.status,
            'message': self.message,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<SwapRequest {self.id} {self.status}>"


class Rating(db.Model):
    __tablename__ = 'ratings'

    id = db.Column(db.Integer, primary_key=True)
    swap_request_id = db.Column(db.Integer, db.ForeignKey('swap_requests.id'), nullable=False)
    rater_id = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False)
    rated_id = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False, index=True)
    rating = db.Column(db.Integer, nullable=False)
    feedback = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.CheckConstraint('rating BETWEEN 1 AND 5', name='rating_range'),
        db.UniqueConstraint('swap_request_id', 'rater_id', name='unique_rating_per_swap'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'swapRequestId': self.swap_request_id,
            'raterId': self.rater_id,
            'ratedId': self.rated_id,
            'rating': self.rating,
            'feedback': self.feedback,
            'createdAt': _iso(self.created_at),
        }


class AdminAction(db.Model):
    __tablename__ = 'admin_actions'

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False)
    action = db.Column(db.String(50), nullable=False)
    target_id = db.Column(db.String(255), nullable=True)
    reason = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'adminId': self.admin_id,
            'action': self.action,
            'targetId': self.target_id,
            'reason': self.reason,
            'createdAt': _iso(self.created_at),
        }


class PlatformMessage(db.Model):
    __tablename__ = 'platform_messages'

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_by = db.Column(db.String(255), db.ForeignKey('users.id'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'isActive': self.is_active,
            'createdBy': self.created_by,
            'createdAt': _iso(self.created_at),
        }
