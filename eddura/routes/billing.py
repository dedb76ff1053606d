from flask import Blueprint, current_app, jsonify

from ..auth import current_user, login_required
from ..errors import Forbidden, NotFound
from ..models import SubscriptionPlan
from ..schemas import SubscribeIn
from ..services import paywall
from ..utils import parse_body

billing_bp = Blueprint('billing', __name__)


@billing_bp.get('/api/billing/plans')
def list_plans():
    plans = SubscriptionPlan.query.filter_by(is_active=True).order_by(SubscriptionPlan.sort_order.asc()).all()
    return {"plans": [p.to_dict() for p in plans]}


@billing_bp.get('/api/billing/subscription')
@login_required
def my_subscription():
    user = current_user()
    subscription = paywall.active_subscription(user)
    return {
        "subscription": subscription.to_dict() if subscription else None,
        "usage": paywall.usage_summary(user),
        "trial": paywall.check_trial(user),
        "paywall_enabled": paywall.paywall_enabled(),
    }


@billing_bp.post('/api/billing/subscribe')
@login_required
def subscribe():
    data = parse_body(SubscribeIn)
    plan = SubscriptionPlan.query.filter_by(plan_id=data.plan_id, is_active=True).first()
    if not plan:
        raise NotFound("Plan not found")
    # Paid plans go through a payment provider outside development
    if plan.monthly_price and current_app.config.get('APP_ENV') == 'production':
        raise Forbidden("Paid plans require checkout through a payment provider")
    subscription = paywall.subscribe(current_user(), plan, data.billing_cycle)
    return jsonify(subscription.to_dict()), 201


@billing_bp.post('/api/billing/cancel')
@login_required
def cancel():
    subscription = paywall.active_subscription(current_user())
    if not subscription:
        raise NotFound("No active subscription found")
    return paywall.cancel(subscription).to_dict()
