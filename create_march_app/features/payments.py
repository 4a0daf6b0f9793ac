"""Stripe payments."""

from __future__ import annotations

import logging

from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services
from .env import append_app_env

logger = logging.getLogger(__name__)

STRIPE_CLIENT = """\
import Stripe from "stripe";

export const stripe = new Stripe(process.env.STRIPE_SECRET_KEY!, {
  typescript: true,
});

export function formatAmountForDisplay(amount: number, currency: string): string {
  return new Intl.NumberFormat(["en-US"], {
    style: "currency",
    currency,
    currencyDisplay: "symbol",
  }).format(amount);
}

export function formatAmountForStripe(amount: number, currency: string): number {
  const parts = new Intl.NumberFormat(["en-US"], {
    style: "currency",
    currency,
    currencyDisplay: "symbol",
  }).formatToParts(amount);
  const zeroDecimal = parts.every((part) => part.type !== "decimal");
  return zeroDecimal ? amount : Math.round(amount * 100);
}
"""

STRIPE_ENV = """\
# Stripe
STRIPE_SECRET_KEY="sk_test_..."
STRIPE_WEBHOOK_SECRET="whsec_..."
NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY="pk_test_..."
"""


async def setup_stripe(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up Stripe...")
    await services.install(ctx, ["stripe", "@stripe/stripe-js"], ctx.app_path)
    await services.fs.write_file(ctx.app_path / "src" / "lib" / "stripe.ts", STRIPE_CLIENT)
    await append_app_env(ctx, services, STRIPE_ENV, "Stripe")
    log_success(logger, "Stripe setup completed")
