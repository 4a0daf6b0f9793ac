"""
create-march-app
================

Scaffolds a TypeScript monorepo (apps, shared libraries, tooling and
optional features) from a set of answers, driving npm, yarn, pnpm or bun
and the framework generators as child processes.
"""

__version__ = "1.0.0"
