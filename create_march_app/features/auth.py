"""NextAuth.js authentication."""

from __future__ import annotations

import logging

from ..answers import Frontend
from ..core.logging import log_step, log_success
from ..core.models import ExecutionContext, Services
from .env import append_app_env

logger = logging.getLogger(__name__)

AUTH_CONFIG = """\
import type { NextAuthOptions } from "next-auth";
import GitHubProvider from "next-auth/providers/github";
import GoogleProvider from "next-auth/providers/google";

export const authOptions: NextAuthOptions = {
  providers: [
    GoogleProvider({
      clientId: process.env.GOOGLE_CLIENT_ID!,
      clientSecret: process.env.GOOGLE_CLIENT_SECRET!,
    }),
    GitHubProvider({
      clientId: process.env.GITHUB_CLIENT_ID!,
      clientSecret: process.env.GITHUB_CLIENT_SECRET!,
    }),
  ],
  pages: { signIn: "/auth/signin" },
  session: { strategy: "jwt" },
  secret: process.env.NEXTAUTH_SECRET,
};
"""

APP_ROUTE_HANDLER = """\
import NextAuth from "next-auth";

import { authOptions } from "@/lib/auth";

const handler = NextAuth(authOptions);

export { handler as GET, handler as POST };
"""

PAGES_API_ROUTE = """\
import NextAuth from "next-auth";

import { authOptions } from "@/lib/auth";

export default NextAuth(authOptions);
"""

MIDDLEWARE = """\
export { default } from "next-auth/middleware";

export const config = { matcher: ["/dashboard/:path*"] };
"""

SIGN_IN_BUTTON = """\
"use client";

import { signIn, signOut, useSession } from "next-auth/react";

export function SignInButton() {
  const { data: session } = useSession();
  if (session) {
    return <button onClick={() => signOut()}>Sign out {session.user?.email}</button>;
  }
  return <button onClick={() => signIn()}>Sign in</button>;
}
"""

AUTH_ENV = """\
# NextAuth.js Configuration
# Generate a secret: openssl rand -base64 32
NEXTAUTH_SECRET="your-nextauth-secret"
NEXTAUTH_URL="http://localhost:3000"
GOOGLE_CLIENT_ID="your-google-client-id"
GOOGLE_CLIENT_SECRET="your-google-client-secret"
GITHUB_CLIENT_ID="your-github-client-id"
GITHUB_CLIENT_SECRET="your-github-client-secret"
"""


async def setup_auth(ctx: ExecutionContext, services: Services) -> None:
    log_step(logger, "Setting up NextAuth.js...")
    fs = services.fs
    app = ctx.app_path

    await services.install(ctx, ["next-auth"], app)
    await fs.write_file(app / "src" / "lib" / "auth.ts", AUTH_CONFIG)
    await fs.write_file(app / "src" / "middleware.ts", MIDDLEWARE)
    await fs.write_file(app / "src" / "components" / "auth" / "SignInButton.tsx", SIGN_IN_BUTTON)

    if ctx.answers.frontend is Frontend.NEXTJS_PAGES:
        await fs.write_file(app / "src" / "pages" / "api" / "auth" / "[...nextauth].ts", PAGES_API_ROUTE)
    else:
        await fs.write_file(app / "src" / "app" / "api" / "auth" / "[...nextauth]" / "route.ts", APP_ROUTE_HANDLER)

    await append_app_env(ctx, services, AUTH_ENV, "NextAuth.js")
    log_success(logger, "Authentication setup completed")
