"""
Data access layer.

Every function here works on the Flask-SQLAlchemy session bound to the current
app context and returns either model instances or denormalised dict views
ready for ``jsonify``. Compositions such as :func:`get_user_with_skills` run
several independent queries with no enclosing transaction.
"""
import math

from flask import current_app
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from skillswap import db
from skillswap.errors import Conflict, Forbidden, NotFound, ValidationError
from skillswap.models import (
    AdminAction,
    PlatformMessage,
    Rating,
    Skill,
    SwapRequest,
    User,
    UserSkillOffered,
    UserSkillWanted,
    STATUS_ACCEPTED,
    STATUS_COMPLETED,
    STATUS_PENDING,
    STATUS_REJECTED,
    SWAP_STATUSES,
    SWAP_TRANSITIONS,
    utcnow,
)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

def get_user(user_id):
    return db.session.get(User, user_id)


def upsert_user(user_data):
    """
    Insert or update a user keyed by ``id``.

    Used when provisioning from the identity provider on login: every supplied
    field overwrites the stored value and ``updated_at`` is refreshed.
    """
    user = get_user(user_data['id'])
    if user is None:
        user = User(**user_data)
        db.session.add(user)
    else:
        for field, value in user_data.items():
            setattr(user, field, value)
        user.updated_at = utcnow()
    try:
        db.session.commit()
    except IntegrityError:
        # Only the email is unique besides the id
        db.session.rollback()
        raise Conflict('This email is already linked to another account')
    return user


def update_user_profile(user_id, fields):
    user = get_user(user_id)
    if user is None:
        raise NotFound('User not found')

    for field, value in fields.items():
        setattr(user, field, value)
    user.updated_at = utcnow()
    db.session.commit()
    return user


def _skills_for(link_model, user_id):
    rows = db.session.execute(
        db.select(Skill.id, Skill.name, Skill.category)
        .join(link_model, link_model.skill_id == Skill.id)
        .where(link_model.user_id == user_id)
        .order_by(link_model.created_at, link_model.id)
    ).all()
    return [{'id': row.id, 'name': row.name, 'category': row.category} for row in rows]


def _with_skills(user):
    user_data = user.to_dict()
    user_data['skillsOffered'] = _skills_for(UserSkillOffered, user.id)
    user_data['skillsWanted'] = _skills_for(UserSkillWanted, user.id)
    user_data['averageRating'] = get_average_rating(user.id)
    return user_data


def get_user_with_skills(user_id):
    user = get_user(user_id)
    if user is None:
        return None
    return _with_skills(user)


def _like_pattern(query):
    # Wildcards typed by the user match literally
    escaped = query.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


def _public_users_filter(filters):
    conditions = [User.is_public.is_(True)]
    availability = (filters or {}).get('availability')
    if availability:
        conditions.append(User.availability == availability)
    return conditions


def search_users(query, filters=None):
    """Case-insensitive match on first name, last name or location; public users only."""
    pattern = _like_pattern(query)
    stmt = db.select(User).where(
        *_public_users_filter(filters),
        or_(
            User.first_name.ilike(pattern, escape='\\'),
            User.last_name.ilike(pattern, escape='\\'),
            User.location.ilike(pattern, escape='\\'),
        ),
    )

    users = db.session.scalars(stmt.order_by(User.created_at, User.id)).all()
    current_app.logger.debug(f"[DEBUG] search_users({query!r}) matched {len(users)} users")
    return [_with_skills(user) for user in users]


def get_public_users(page=1, limit=9, filters=None):
    """One page of public users in creation order, plus the total across all pages."""
    page = max(int(page), 1)
    limit = max(int(limit), 1)
    offset = (page - 1) * limit
    conditions = _public_users_filter(filters)

    users = db.session.scalars(
        db.select(User)
        .where(*conditions)
        .order_by(User.created_at, User.id)
        .limit(limit)
        .offset(offset)
    ).all()

    total = db.session.scalar(
        db.select(func.count()).select_from(User).where(*conditions)
    )

    return {'users': [_with_skills(user) for user in users], 'total': total}


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------

def get_skills():
    return db.session.scalars(
        db.select(Skill)
        .where(Skill.is_active.is_(True))
        .order_by(func.lower(Skill.name), Skill.name)
    ).all()


def find_skill_by_name(name):
    return db.session.scalars(
        db.select(Skill).where(func.lower(Skill.name) == name.strip().lower())
    ).first()


def create_skill(skill_data):
    """Plain insert; callers look the name up first (see find_or_create_skill)."""
    skill = Skill(name=skill_data['name'].strip(), category=skill_data.get('category'))
    db.session.add(skill)
    db.session.commit()
    return skill


def find_or_create_skill(name, category=None):
    skill = find_skill_by_name(name)
    if skill is None:
        try:
            return create_skill({'name': name, 'category': category})
        except IntegrityError:
            # Lost the race against a concurrent insert of the same name
            db.session.rollback()
            skill = find_skill_by_name(name)
            if skill is None:
                raise

    if not skill.is_active:
        raise Conflict(f"Skill '{skill.name}' has been rejected by moderation")
    return skill


def get_user_skills_offered(user_id):
    return _skills_for(UserSkillOffered, user_id)


def get_user_skills_wanted(user_id):
    return _skills_for(UserSkillWanted, user_id)


def _add_link(link_model, user_id, skill_id):
    skill = db.session.get(Skill, skill_id)
    if skill is None or not skill.is_active:
        raise NotFound('Skill not found')

    existing = db.session.scalars(
        db.select(link_model).where(link_model.user_id == user_id, link_model.skill_id == skill_id)
    ).first()
    if existing is not None:
        return

    db.session.add(link_model(user_id=user_id, skill_id=skill_id))
    try:
        db.session.commit()
    except IntegrityError:
        # Concurrent add of the same link; the set already holds it
        db.session.rollback()


def _remove_link(link_model, user_id, skill_id):
    db.session.execute(
        db.delete(link_model).where(link_model.user_id == user_id, link_model.skill_id == skill_id)
    )
    db.session.commit()


def add_user_skill_offered(user_id, skill_id):
    _add_link(UserSkillOffered, user_id, skill_id)


def add_user_skill_wanted(user_id, skill_id):
    _add_link(UserSkillWanted, user_id, skill_id)


def remove_user_skill_offered(user_id, skill_id):
    _remove_link(UserSkillOffered, user_id, skill_id)


def remove_user_skill_wanted(user_id, skill_id):
    _remove_link(UserSkillWanted, user_id, skill_id)


# ---------------------------------------------------------------------------
# Swap requests
# ---------------------------------------------------------------------------

def create_swap_request(request_data):
    if request_data['requester_id'] == request_data['recipient_id']:
        raise ValidationError('You cannot send a swap request to yourself')

    if get_user(request_data['recipient_id']) is None:
        raise NotFound('Recipient not found')

    for key in ('offered_skill_id', 'wanted_skill_id'):
        skill = db.session.get(Skill, request_data[key])
        if skill is None or not skill.is_active:
            raise NotFound('Skill not found')

    swap_request = SwapRequest(
        requester_id=request_data['requester_id'],
        recipient_id=request_data['recipient_id'],
        offered_skill_id=request_data['offered_skill_id'],
        wanted_skill_id=request_data['wanted_skill_id'],
        message=request_data.get('message'),
        status=STATUS_PENDING,
    )
    db.session.add(swap_request)
    db.session.commit()
    return swap_request


def _swap_request_view_query():
    # Each side gets its own alias so requester and recipient never share a join
    requester = aliased(User, name='requester')
    recipient = aliased(User, name='recipient')
    offered_skill = aliased(Skill, name='offered_skill')
    wanted_skill = aliased(Skill, name='wanted_skill')

    return (
        db.select(SwapRequest, requester, recipient, offered_skill, wanted_skill)
        .outerjoin(requester, SwapRequest.requester_id == requester.id)
        .outerjoin(recipient, SwapRequest.recipient_id == recipient.id)
        .outerjoin(offered_skill, SwapRequest.offered_skill_id == offered_skill.id)
        .outerjoin(wanted_skill, SwapRequest.wanted_skill_id == wanted_skill.id)
        .order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
    )


def _swap_request_view(row):
    swap_request, requester, recipient, offered_skill, wanted_skill = row
    view = swap_request.to_dict()
    view['requester'] = requester.summary() if requester else None
    view['recipient'] = recipient.summary() if recipient else None
    view['offeredSkill'] = {'id': offered_skill.id, 'name': offered_skill.name} if offered_skill else None
    view['wantedSkill'] = {'id': wanted_skill.id, 'name': wanted_skill.name} if wanted_skill else None
    return view


def get_swap_requests_for_user(user_id):
    stmt = _swap_request_view_query().where(
        or_(SwapRequest.requester_id == user_id, SwapRequest.recipient_id == user_id)
    )
    return [_swap_request_view(row) for row in db.session.execute(stmt).all()]


def get_swap_request_by_id(request_id):
    return db.session.get(SwapRequest, request_id)


def update_swap_request_status(request_id, status, acting_user_id=None):
    """
    Move a swap request along ``pending -> accepted|rejected -> completed``.

    When ``acting_user_id`` is given the caller's role is enforced as well:
    only the recipient answers a pending request, and only a participant can
    mark an accepted swap as completed.
    """
    if status not in SWAP_STATUSES:
        raise ValidationError(f"Invalid status '{status}'")

    swap_request = get_swap_request_by_id(request_id)
    if swap_request is None:
        raise NotFound('Swap request not found')

    if acting_user_id is not None:
        if status in (STATUS_ACCEPTED, STATUS_REJECTED) and acting_user_id != swap_request.recipient_id:
            raise Forbidden('Only the recipient can accept or reject a swap request')
        if acting_user_id not in (swap_request.requester_id, swap_request.recipient_id):
            raise Forbidden('Only participants can update a swap request')

    if status not in SWAP_TRANSITIONS[swap_request.status]:
        raise Conflict(f"Cannot change status from {swap_request.status} to {status}")

    swap_request.status = status
    swap_request.updated_at = utcnow()
    db.session.commit()
    return swap_request


def delete_swap_request(request_id, user_id):
    """Delete a pending request owned by ``user_id``. Returns False when nothing matched."""
    result = db.session.execute(
        db.delete(SwapRequest).where(
            SwapRequest.id == request_id,
            SwapRequest.requester_id == user_id,
            SwapRequest.status == STATUS_PENDING,
        )
    )
    db.session.commit()
    return result.rowcount > 0


# ---------------------------------------------------------------------------
# Ratings
# ---------------------------------------------------------------------------

def create_rating(rating_data):
    value = rating_data.get('rating')
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
        raise ValidationError('Rating must be an integer between 1 and 5')

    swap_request = get_swap_request_by_id(rating_data['swap_request_id'])
    if swap_request is None:
        raise NotFound('Swap request not found')

    rater_id = rating_data['rater_id']
    participants = (swap_request.requester_id, swap_request.recipient_id)
    if rater_id not in participants:
        raise Forbidden('Only participants can rate a swap')

    if swap_request.status != STATUS_COMPLETED:
        raise Conflict('Only completed swaps can be rated')

    other_party = swap_request.recipient_id if rater_id == swap_request.requester_id else swap_request.requester_id
    rated_id = rating_data.get('rated_id') or other_party
    if rated_id != other_party:
        raise ValidationError('You can only rate the other participant of the swap')

    already_rated = db.session.scalars(
        db.select(Rating).where(Rating.swap_request_id == swap_request.id, Rating.rater_id == rater_id)
    ).first()
    if already_rated is not None:
        raise Conflict('You have already rated this swap')

    rating = Rating(
        swap_request_id=swap_request.id,
        rater_id=rater_id,
        rated_id=rated_id,
        rating=value,
        feedback=rating_data.get('feedback'),
    )
    db.session.add(rating)
    db.session.commit()
    return rating


def get_user_ratings(user_id):
    rows = db.session.execute(
        db.select(Rating, User)
        .outerjoin(User, Rating.rater_id == User.id)
        .where(Rating.rated_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    ).all()

    ratings = []
    for rating, rater in rows:
        rating_data = rating.to_dict()
        rating_data['rater'] = rater.summary() if rater else None
        ratings.append(rating_data)
    return ratings


def get_average_rating(user_id):
    """Mean rating rounded half-up to one decimal; 0 when the user has none."""
    average = db.session.scalar(
        db.select(func.avg(Rating.rating)).where(Rating.rated_id == user_id)
    )
    if average is None:
        return 0
    return math.floor(float(average) * 10 + 0.5) / 10


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------

def get_all_users():
    return db.session.scalars(db.select(User).order_by(User.created_at.desc(), User.id)).all()


def log_admin_action(admin_id, action, target_id, reason=None, commit=True):
    admin_action = AdminAction(
        admin_id=admin_id,
        action=action,
        target_id=str(target_id) if target_id is not None else None,
        reason=reason,
    )
    db.session.add(admin_action)
    if commit:
        db.session.commit()
    return admin_action


def _set_visibility(user_id, admin_id, is_public, action, reason=None):
    user = get_user(user_id)
    if user is None:
        raise NotFound('User not found')

    user.is_public = is_public
    user.updated_at = utcnow()
    log_admin_action(admin_id, action, user_id, reason, commit=False)
    db.session.commit()
    return user


def ban_user(user_id, admin_id, reason=None):
    return _set_visibility(user_id, admin_id, False, 'ban_user', reason)


def unban_user(user_id, admin_id):
    return _set_visibility(user_id, admin_id, True, 'unban_user')


def get_pending_skills():
    return db.session.scalars(
        db.select(Skill)
        .where(Skill.is_active.is_(True))
        .order_by(Skill.created_at.desc(), Skill.id.desc())
    ).all()


def approve_skill(skill_id, admin_id):
    # Skills are live as soon as they are created; approval is only recorded
    if db.session.get(Skill, skill_id) is None:
        raise NotFound('Skill not found')
    log_admin_action(admin_id, 'approve_skill', skill_id)


def reject_skill(skill_id, admin_id, reason=None):
    skill = db.session.get(Skill, skill_id)
    if skill is None:
        raise NotFound('Skill not found')

    skill.is_active = False
    db.session.execute(db.delete(UserSkillOffered).where(UserSkillOffered.skill_id == skill_id))
    db.session.execute(db.delete(UserSkillWanted).where(UserSkillWanted.skill_id == skill_id))
    log_admin_action(admin_id, 'reject_skill', skill_id, reason, commit=False)
    db.session.commit()
    return skill


def get_all_swap_requests():
    return [_swap_request_view(row) for row in db.session.execute(_swap_request_view_query()).all()]


def create_platform_message(message_data):
    message = PlatformMessage(
        title=message_data['title'],
        content=message_data['content'],
        is_active=message_data.get('is_active', True),
        created_by=message_data['created_by'],
    )
    db.session.add(message)
    db.session.flush()
    log_admin_action(message.created_by, 'send_message', message.id, commit=False)
    db.session.commit()
    return message


def deactivate_platform_message(message_id, admin_id):
    message = db.session.get(PlatformMessage, message_id)
    if message is None:
        raise NotFound('Platform message not found')

    message.is_active = False
    log_admin_action(admin_id, 'deactivate_message', message_id, commit=False)
    db.session.commit()
    return message


def get_active_platform_messages():
    return db.session.scalars(
        db.select(PlatformMessage)
        .where(PlatformMessage.is_active.is_(True))
        .order_by(PlatformMessage.created_at.desc(), PlatformMessage.id.desc())
    ).all()


def get_admin_actions(limit=100):
    return db.session.scalars(
        db.select(AdminAction)
        .order_by(AdminAction.created_at.desc(), AdminAction.id.desc())
        .limit(limit)
    ).all()
