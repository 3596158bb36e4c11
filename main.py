#!/usr/bin/env python3
"""
pocketduel - one-on-one creature battles in the terminal

Thin wrapper around the package entry point. The battle engine lives in the
pocketduel package:
- battle (damage resolution, sessions, turn service)
- transport (request/response contract and local endpoint)
- client (state machine mirror and controller)
- ui (rich rendering)

To run: python main.py [--wild --enemy 25] [--seed 7]
"""

from pocketduel.cli import run

if __name__ == "__main__":
    run()
