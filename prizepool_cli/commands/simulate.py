"""
CLI Simulate Command

Replay a scripted scenario against an in-memory host and registry, then
report each step's outcome, the final competition records and the event
log.

Scenario file (YAML or JSON):

    admin: "0xadmin"
    native:                      # initial native balances
      "0xalice": 100
    tokens:                      # token label -> address and balances
      USD:
        address: "0xtoken"
        balances: {"0xalice": 1000}
    steps:
      - {op: create, mode: batch_proof, asset: USD, entry_fee: 100}
      - {op: approve, token: USD, owner: "0xalice", amount: 100}
      - {op: join, competition: 1, identity: "0xalice", value: 0}
      - {op: publish_root, competition: 1, entitlements: {"0xalice": 100}}
      - {op: claim, competition: 1, caller: "0xalice", amount: 100}
      - {op: claim, competition: 1, caller: "0xalice", amount: 100, expect: ALREADY_CLAIMED}

Steps default `caller` to the admin for create/set_winner/publish_root and
to `identity` for join. A claim without `proof` uses the tree built by the
competition's publish_root step. A step with `expect` passes only if it
fails with that error code.

Usage:
    prizepool simulate scenario.yaml [--no-guard] [--json]
"""

from __future__ import annotations

import json
import logging
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from core.config.runtime import RuntimeConfig
from core.crypto.hashing import to_hex
from core.escrow.registry import CompetitionRegistry
from core.host.ledger import HostLedger
from core.host.token import InMemoryToken
from core.merkle.merkle_proofs import ClaimTree
from core.schemas.canonical import canonicalize_value
from core.schemas.competition import CompetitionMode, NativeAsset, TokenAsset
from core.schemas.errors import EscrowException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class StepOutcome:
    """Result of one scenario step."""
    index: int
    op: str
    ok: bool
    result: Any = None
    error: Optional[dict[str, Any]] = None  # EscrowError.model_dump()
    expected: Optional[str] = None

    @property
    def error_code(self) -> Optional[str]:
        return self.error["code"] if self.error else None

    @property
    def error_message(self) -> Optional[str]:
        return self.error["message"] if self.error else None

    @property
    def as_expected(self) -> bool:
        if self.expected is None:
            return self.ok
        return not self.ok and self.error_code == self.expected


@dataclass
class SimulationReport:
    """Summary of a scenario run for CLI output."""
    scenario: str = ""
    steps: list[StepOutcome] = field(default_factory=list)
    competitions: list[dict[str, Any]] = field(default_factory=list)
    balances: dict[str, dict[str, int]] = field(default_factory=dict)
    events: list[dict[str, Any]] = field(default_factory=list)

    @property
    def all_ok(self) -> bool:
        return all(s.as_expected for s in self.steps)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["all_ok"] = self.all_ok
        return d


class ScenarioRunner:
    """Executes scenario steps against a fresh registry."""

    def __init__(self, scenario: dict[str, Any], config: RuntimeConfig) -> None:
        self.scenario = scenario
        admin = scenario.get("admin") or config.registry.administrator
        if not admin:
            raise ValueError("Scenario needs an 'admin' (or PRIZEPOOL_ADMIN)")
        self.admin = admin

        run_config = RuntimeConfig.from_dict(config.to_dict())
        run_config.registry.administrator = admin

        self.host = HostLedger()
        self.registry = CompetitionRegistry.from_config(run_config, host=self.host)
        self.tokens: dict[str, InMemoryToken] = {}
        self.trees: dict[int, ClaimTree] = {}

        for account, amount in (scenario.get("native") or {}).items():
            self.host.credit(account, amount)

        for label, spec in (scenario.get("tokens") or {}).items():
            token = InMemoryToken(spec.get("address", f"0x{label.lower()}"), host=self.host, symbol=label)
            for account, amount in (spec.get("balances") or {}).items():
                token.mint(account, amount)
            self.tokens[label] = token

    def _asset(self, name: str | None):
        if name is None or name == "native":
            return NativeAsset()
        if name not in self.tokens:
            raise ValueError(f"Unknown token label: {name}")
        return TokenAsset.of(self.tokens[name])

    def _execute(self, step: dict[str, Any]) -> Any:
        op = step["op"]
        registry = self.registry

        if op == "create":
            return registry.create_competition(
                CompetitionMode(step["mode"]),
                self._asset(step.get("asset")),
                step["entry_fee"],
                caller=step.get("caller", self.admin),
            )
        if op == "approve":
            token = self.tokens[step["token"]]
            return token.approve(step["owner"], registry.address, step["amount"])
        if op == "join":
            return registry.join(
                step["competition"],
                step["identity"],
                caller=step.get("caller", step["identity"]),
                value=step.get("value", 0),
            )
        if op == "set_winner":
            return registry.set_winner(
                step["competition"],
                step["winner"],
                caller=step.get("caller", self.admin),
            )
        if op == "publish_root":
            root = step.get("root")
            if root is None:
                tree = ClaimTree(step["entitlements"])
                self.trees[step["competition"]] = tree
                root = tree.root
            registry.publish_claim_root(step["competition"], root, caller=step.get("caller", self.admin))
            return to_hex(registry.get_competition(step["competition"]).claim_root)
        if op == "claim":
            proof = step.get("proof")
            if proof is None:
                tree = self.trees.get(step["competition"])
                proof = tree.proof_for(step["caller"]) if tree and step["caller"] in tree else []
            return registry.claim(step["competition"], step["amount"], proof, caller=step["caller"])

        raise ValueError(f"Unknown scenario op: {op}")

    def run(self) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        for index, step in enumerate(self.scenario.get("steps") or [], start=1):
            outcome = StepOutcome(index=index, op=step.get("op", "?"), ok=True, expected=step.get("expect"))
            try:
                outcome.result = self._execute(step)
            except EscrowException as e:
                outcome.ok = False
                outcome.error = e.to_error_model().model_dump()
            if not outcome.as_expected:
                logger.warning(
                    f"Step {index} ({outcome.op}) did not go as expected: {outcome.error_message or 'succeeded'}"
                )
            outcomes.append(outcome)
        return outcomes

    def balances(self) -> dict[str, dict[str, int]]:
        accounts: set[str] = set(self.scenario.get("native") or {}) | {self.registry.address}
        for spec in (self.scenario.get("tokens") or {}).values():
            accounts |= set(spec.get("balances") or {})
        result = {"native": {a: self.host.balance_of(a) for a in sorted(accounts)}}
        for label, token in self.tokens.items():
            result[label] = {a: token.balance_of(a) for a in sorted(accounts)}
        return result


def load_scenario(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Scenario file not found: {path}")
    with open(path) as f:
        data = json.load(f) if path.suffix.lower() == ".json" else yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Scenario file must contain a mapping")
    return data


def run_scenario(scenario: dict[str, Any], config: RuntimeConfig, name: str = "") -> SimulationReport:
    """Run a scenario and collect the report."""
    runner = ScenarioRunner(scenario, config)
    steps = runner.run()
    return SimulationReport(
        scenario=name,
        steps=steps,
        competitions=[
            runner.registry.get_competition(cid).summary()
            for cid in runner.registry.competition_ids()
        ],
        balances=runner.balances(),
        events=[canonicalize_value(e) for e in runner.registry.events()],
    )


def print_report_human(report: SimulationReport) -> None:
    print(f"scenario: {report.scenario}")
    for step in report.steps:
        mark = "✓" if step.as_expected else "✗"
        detail = f"-> {step.result}" if step.ok else f"{step.error_code}: {step.error_message}"
        print(f"  {mark} [{step.index}] {step.op} {detail}")
    print("\ncompetitions:")
    for c in report.competitions:
        print(
            f"  #{c['id']} {c['mode']} {c['status']} asset={c['asset']} "
            f"pool={c['pooled_balance']} deposited={c['total_deposited']} paid={c['total_paid_out']}"
        )
    print(f"\nevents: {len(report.events)}")
    print(f"all_ok: {str(report.all_ok).lower()}")


def simulate_cmd(args: Namespace) -> int:
    """Handle simulate command."""
    config: RuntimeConfig = args.runtime_config
    if args.no_guard:
        config = RuntimeConfig.from_dict(config.to_dict())
        config.registry.reentrancy_guard = False

    scenario = load_scenario(args.scenario)
    logger.info(f"Running scenario {args.scenario} ({len(scenario.get('steps') or [])} steps)")
    report = run_scenario(scenario, config, name=str(args.scenario))

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        print_report_human(report)

    return EXIT_SUCCESS if report.all_ok else EXIT_VERIFICATION_FAILED
