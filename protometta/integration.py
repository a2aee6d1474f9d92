"""
protometta Integration Layer

Wraps an Interpreter for use by external drivers: status reporting, usage
counters, evaluation metrics, and conversion of AtomSpace-style nodes and
links into MeTTa atoms.
"""

from typing import Dict, List, Optional, Sequence
import logging
import time

from .bindings import Bindings
from .config import InterpreterConfig
from .core import Atom, Expression, Grounded, Symbol
from .interpreter import Interpreter
from .matcher import match_all
from .metrics import MetricsTracker
from .parser import parse
from .space import Space

logger = logging.getLogger(__name__)


class AtomSpaceBridge:
    """Converts AtomSpace nodes and links to MeTTa atoms and runs code on them."""

    def __init__(self, interpreter: Optional[Interpreter] = None):
        self.interpreter = interpreter or Interpreter()

    def to_metta_atom(self, atom_type: str, name: Optional[str] = None,
                      outgoing: Sequence[Atom] = ()) -> Expression:
        """
        Build ``(Type "name")`` for a node or ``(Type child...)`` for a link.

        Args:
            atom_type: AtomSpace type name, e.g. ConceptNode
            name: Node name (ignored for links)
            outgoing: Outgoing set of a link; empty for nodes
        """
        children: List[Atom] = [Symbol(atom_type)]
        if outgoing:
            children.extend(outgoing)
        elif name is not None:
            children.append(Grounded(name))
        return Expression(children)

    def execute(self, code: str) -> List[Atom]:
        return self.interpreter.run(code)

    def match_pattern(self, atoms: Sequence[Atom], pattern: str) -> List[Bindings]:
        parsed = parse(pattern)
        if not parsed:
            return []
        return match_all(atoms, parsed[0])


class MettaIntegration:
    """
    Interpreter wrapper with lifecycle, counters and metrics.

    Counters track how many evaluations, rule definitions and queries went
    through the wrapper; ``status()`` reports them as strings.
    """

    VERSION = "0.3.0"

    def __init__(self, config: Optional[InterpreterConfig] = None):
        self.config = config or InterpreterConfig()
        self.interpreter = Interpreter(
            max_steps=self.config.max_reduction_steps,
            max_depth=self.config.max_depth,
            trace=self.config.enable_trace,
            default_space=self.config.default_space_name,
        )
        self.bridge = AtomSpaceBridge(self.interpreter)
        self.metrics = MetricsTracker()
        self.initialized = False
        self.expressions_evaluated = 0
        self.rules_defined = 0
        self.patterns_matched = 0

    def initialize_backend(self) -> bool:
        if self.initialized:
            return True
        if self.config.load_stdlib:
            self.interpreter.load_stdlib()
        self.initialized = True
        logger.info(f"MeTTa integration v{self.VERSION} initialized")
        return True

    def status(self) -> Dict[str, str]:
        space = self.interpreter.space
        return {
            "integration": "metta",
            "version": self.VERSION,
            "status": "ready" if self.initialized else "not_initialized",
            "stdlib_loaded": str(self.config.load_stdlib).lower(),
            "space_name": space.name,
            "space_size": str(space.size),
            "expressions_evaluated": str(self.expressions_evaluated),
            "rules_defined": str(self.rules_defined),
            "patterns_matched": str(self.patterns_matched),
            "max_reduction_steps": str(self.config.max_reduction_steps),
            "trace_enabled": str(self.config.enable_trace).lower(),
        }

    def run(self, code: str) -> List[Atom]:
        self.expressions_evaluated += 1
        start = time.time()
        results = self.interpreter.run(code)
        self.metrics.record(code, results, time.time() - start)
        return results

    def eval(self, code: str) -> Optional[Atom]:
        results = self.run(code)
        return results[0] if results else None

    def define_rule(self, name: str, pattern: str, template: str, priority: int = 0):
        """Parse ``pattern`` and ``template`` and install them as a named rule."""
        pattern_atoms = parse(pattern)
        template_atoms = parse(template)
        if not pattern_atoms or not template_atoms:
            raise ValueError(f"Rule {name} needs a pattern and a template")
        rule = self.interpreter.space.define(name, pattern_atoms[0], template_atoms[0],
                                             priority=priority)
        self.rules_defined += 1
        return rule

    def query(self, pattern: str) -> List[Bindings]:
        self.patterns_matched += 1
        return self.interpreter.query(pattern)

    def add_atom(self, atom: Atom) -> bool:
        return self.interpreter.add_atom(atom)

    def add(self, code: str) -> None:
        self.interpreter.add(code)

    def use_space(self, name: str) -> Space:
        return self.interpreter.use_space(name)

    @property
    def space(self) -> Space:
        return self.interpreter.space

    def export(self) -> str:
        return self.interpreter.space.to_metta()

    def atomspace_to_metta(self, atom_type: str, name: Optional[str] = None,
                           outgoing: Sequence[Atom] = ()) -> Expression:
        return self.bridge.to_metta_atom(atom_type, name, outgoing)

    def repl(self):
        self.interpreter.repl()

    def disconnect(self):
        self.initialized = False


def create_default_integration() -> MettaIntegration:
    return MettaIntegration()


def create_integration(load_stdlib: bool = True, max_steps: int = 1000,
                       config: Optional[InterpreterConfig] = None) -> MettaIntegration:
    """Create an integration from explicit settings or a full InterpreterConfig."""
    if config is None:
        config = InterpreterConfig(load_stdlib=load_stdlib, max_reduction_steps=max_steps)
    return MettaIntegration(config)
