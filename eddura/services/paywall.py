"""Subscription plans, usage limits and trial checks guarding paid features."""
import logging
import math
from datetime import datetime, timedelta
from functools import wraps

from flask import current_app, jsonify

from ..auth import current_user
from ..errors import PaywallRestricted
from ..models import db, Application, Document, SavedScholarship, Subscription, SubscriptionPlan

logger = logging.getLogger(__name__)

PLAN_RANK = {'free': 0, 'basic': 1, 'premium': 2, 'enterprise': 3}
ACTIVE_STATUSES = ('active', 'trialing')


def paywall_enabled(config=None):
    config = config if config is not None else current_app.config
    return bool(config.get('PAYMENTS_ENABLED')) and config.get('ENABLE_PAYWALL', True) is not False


def active_subscription(user):
    return (Subscription.query
            .filter(Subscription.user_id == user.id, Subscription.status.in_(ACTIVE_STATUSES))
            .order_by(Subscription.created_at.desc())
            .first())


def check_feature_access(subscription, feature):
    if subscription is None:
        return {"allowed": False, "reason": "No active subscription found"}
    plan = subscription.plan
    if plan is None:
        return {"allowed": False, "reason": "Plan not found"}
    if (plan.features or {}).get(feature) is False:
        return {"allowed": False, "reason": f"Feature '{feature}' not available in your plan"}
    return {"allowed": True}


def current_usage(user, usage_type):
    if usage_type == 'applications':
        return Application.query.filter_by(user_id=user.id).count()
    if usage_type == 'documents':
        return Document.query.filter_by(user_id=user.id, is_active=True).count()
    if usage_type == 'recommendations':
        return Document.query.filter_by(user_id=user.id, type='recommendation_letter').count()
    if usage_type == 'scholarships':
        return SavedScholarship.query.filter_by(user_id=user.id).count()
    return 0


def check_usage_limit(subscription, usage_type, current):
    if subscription is None:
        return {"allowed": False, "reason": "No active subscription found"}
    plan = subscription.plan
    if plan is None:
        return {"allowed": False, "reason": "Plan not found"}
    limit = (plan.features or {}).get(f"max_{usage_type}", 0)
    if limit == -1:
        return {"allowed": True, "usage": {"current": current, "limit": -1, "percentage": 0}}
    allowed = current < limit
    result = {
        "allowed": allowed,
        "usage": {"current": current, "limit": limit, "percentage": current / limit * 100 if limit > 0 else 0},
    }
    if not allowed:
        result["reason"] = f"Usage limit exceeded for {usage_type}"
    return result


def check_trial(user, now=None):
    config = current_app.config
    if not config.get('ENABLE_TRIALS', True) or not user.created_at:
        return None
    now = now or datetime.utcnow()
    end = user.created_at + timedelta(days=config.get('TRIAL_DURATION_DAYS', 7))
    if now > end:
        return None
    return {
        "is_active": True,
        "days_remaining": math.ceil((end - now).total_seconds() / 86400),
        "end_date": end.isoformat(),
    }


def enforce_paywall(user, feature=None, usage_type=None, required_plan=None, allow_trial=True):
    if not paywall_enabled():
        return {"allowed": True, "reason": "Paywall disabled"}

    subscription = active_subscription(user)
    if subscription is None:
        trial = check_trial(user) if allow_trial else None
        if trial:
            return {"allowed": True, "trial": trial}
        _deny(user, "No active subscription found")

    if feature:
        result = check_feature_access(subscription, feature)
        if not result["allowed"]:
            _deny(user, result["reason"], subscription=subscription)

    usage = None
    if usage_type:
        usage = check_usage_limit(subscription, usage_type, current_usage(user, usage_type))
        if not usage["allowed"]:
            _deny(user, usage["reason"], subscription=subscription, usage=usage["usage"])

    if required_plan and subscription.plan is not None:
        if PLAN_RANK.get(subscription.plan.plan_type, 0) < PLAN_RANK[required_plan]:
            _deny(user, f"{required_plan} plan or higher required", subscription=subscription)

    result = {"allowed": True, "subscription": subscription.to_dict()}
    if usage:
        result["usage"] = usage["usage"]
    return result


def _deny(user, reason, subscription=None, usage=None, trial=None):
    logger.info("Paywall denied user %s: %s", user.id, reason)
    raise PaywallRestricted(
        reason,
        subscription=subscription.to_dict() if subscription is not None else None,
        usage=usage,
        trial=trial,
    )


def requires_access(feature=None, usage_type=None, required_plan=None, allow_trial=True):
    """View decorator that runs the paywall for the current user before the view."""
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if not user:
                return jsonify({"error": "unauthorized"}), 401
            enforce_paywall(user, feature=feature, usage_type=usage_type,
                            required_plan=required_plan, allow_trial=allow_trial)
            return view(*args, **kwargs)
        return wrapper
    return decorator


def usage_summary(user):
    subscription = active_subscription(user)
    features = (subscription.plan.features or {}) if subscription and subscription.plan else {}
    summary = {}
    for usage_type in ('applications', 'documents', 'recommendations', 'scholarships'):
        limit = features.get(f"max_{usage_type}", 0)
        current = current_usage(user, usage_type)
        summary[usage_type] = {
            "current": current,
            "limit": limit,
            "percentage": 0 if limit in (0, -1) else current / limit * 100,
        }
    return summary


def subscribe(user, plan, billing_cycle='monthly'):
    now = datetime.utcnow()
    for existing in Subscription.query.filter(Subscription.user_id == user.id,
                                              Subscription.status.in_(ACTIVE_STATUSES)).all():
        existing.status = 'canceled'
        existing.canceled_at = now
    period = timedelta(days=365 if billing_cycle == 'yearly' else 30)
    subscription = Subscription(
        user_id=user.id,
        plan_id=plan.id,
        status='active',
        billing_cycle=billing_cycle,
        current_period_start=now,
        current_period_end=now + period,
    )
    db.session.add(subscription)
    db.session.commit()
    logger.info("User %s subscribed to %s (%s)", user.id, plan.plan_id, billing_cycle)
    return subscription


def cancel(subscription, at_period_end=True):
    if at_period_end:
        subscription.cancel_at_period_end = True
    else:
        subscription.status = 'canceled'
    subscription.canceled_at = datetime.utcnow()
    db.session.commit()
    return subscription


def _features(max_apps, max_docs, max_recs, max_scholarships, **flags):
    features = {
        "max_applications": max_apps,
        "max_documents": max_docs,
        "max_recommendations": max_recs,
        "max_scholarships": max_scholarships,
        "document_library": True,
        "career_quiz": True,
    }
    features.update(flags)
    return features


DEFAULT_PLANS = [
    dict(plan_id='free', name='Free Plan', plan_type='free', sort_order=0,
         description='Basic access to the platform with essential features',
         monthly_price=0, yearly_price=0,
         features=_features(3, 5, 2, 10, document_cloning=False, document_rating=False, ai_features=False,
                            ai_review=False, ai_analysis=False, requirements_templates=False)),
    dict(plan_id='basic', name='Basic Plan', plan_type='basic', sort_order=1,
         description='Perfect for individual students and professionals',
         monthly_price=9.99, yearly_price=99.99,
         features=_features(10, 20, 5, 50, document_cloning=True, document_rating=True, ai_features=True,
                            ai_review=False, ai_analysis=True, requirements_templates=True)),
    dict(plan_id='premium', name='Premium Plan', plan_type='premium', sort_order=2,
         description='Advanced features for serious applicants and professionals',
         monthly_price=19.99, yearly_price=199.99,
         features=_features(50, 100, 15, 200, document_cloning=True, document_rating=True, ai_features=True,
                            ai_review=True, ai_analysis=True, requirements_templates=True)),
    dict(plan_id='enterprise', name='Enterprise Plan', plan_type='enterprise', sort_order=3,
         description='Full-featured plan for institutions and large organizations',
         monthly_price=49.99, yearly_price=499.99,
         features=_features(-1, -1, -1, -1, document_cloning=True, document_rating=True, ai_features=True,
                            ai_review=True, ai_analysis=True, requirements_templates=True)),
]


def seed_default_plans():
    if SubscriptionPlan.query.count() > 0:
        return 0
    for plan in DEFAULT_PLANS:
        db.session.add(SubscriptionPlan(currency='USD', is_active=True, **plan))
    db.session.commit()
    logger.info("Seeded %d subscription plans", len(DEFAULT_PLANS))
    return len(DEFAULT_PLANS)
