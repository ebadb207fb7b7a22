import random
from dataclasses import dataclass

from coursedesk.api_client import AdminApiClient
from coursedesk.exceptions import ActionValidationError

CODE_SPACE = range(1000, 10000)


@dataclass
class CouponDefaults:
    discount_value: str = ""
    uses_per_coupon: str = ""

    @property
    def empty(self) -> bool:
        return not self.discount_value and not self.uses_per_coupon


def generate_coupons(count: int, defaults: CouponDefaults, prefix: str,
                     existing: set[str] | None = None, rng: random.Random | None = None) -> list[dict]:
    """``count`` new coupons with codes "<prefix><4 digits>", unique in the batch."""
    if count <= 0:
        raise ActionValidationError("Coupon count must be at least 1")
    existing = existing or set()
    free = [n for n in CODE_SPACE if f"{prefix}{n}" not in existing]
    if count > len(free):
        raise ActionValidationError(f"Only {len(free)} unused codes left for prefix '{prefix}'")
    rng = rng or random.SystemRandom()
    return [
        {
            "code": f"{prefix}{n}",
            "discount_value": defaults.discount_value,
            "uses_per_coupon": defaults.uses_per_coupon,
        }
        for n in rng.sample(free, count)
    ]


def apply_defaults(coupons: list[dict], defaults: CouponDefaults) -> list[dict]:
    if defaults.empty:
        raise ActionValidationError("Enter default amount or limit first!")
    for coupon in coupons:
        if defaults.discount_value:
            coupon["discount_value"] = defaults.discount_value
        if defaults.uses_per_coupon:
            coupon["uses_per_coupon"] = defaults.uses_per_coupon
    return coupons


def coupon_payload(coupon: dict, created_by: int = 1) -> dict:
    return {
        "code": coupon["code"],
        "discount_value": coupon.get("discount_value") or "",
        "uses_per_coupon": coupon.get("uses_per_coupon") or "",
        "created_by": created_by,
        "is_active": True,
    }


async def submit_coupons(client: AdminApiClient, coupons: list[dict]) -> int:
    """One coupon goes to createCoupon, several to bulkCreateCoupons."""
    if not coupons:
        raise ActionValidationError("Please generate coupons first!")
    if len(coupons) == 1:
        await client.create_coupon(coupon_payload(coupons[0]))
    else:
        await client.bulk_create_coupons([coupon_payload(c) for c in coupons])
    return len(coupons)
