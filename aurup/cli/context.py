from __future__ import annotations

import os
from dataclasses import dataclass

from aurup.core.config import RunEnvironment
from aurup.output.console import ConsoleProtocol, RichConsole
from aurup.services.update.publish import RegistryTransport
from aurup.upstream.http import HttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    env: RunEnvironment
    console: ConsoleProtocol
    http: HttpClient | None = None
    transport: RegistryTransport | None = None


def build_context() -> CLIContext:
    env = RunEnvironment.from_environ(os.environ)
    return CLIContext(
        env=env,
        console=RichConsole(github_actions=env.github_actions),
    )
