"""Pure transforms applied to coupon feed lines."""
