"""Built-in xTB instruction catalog and lookup helpers."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from xcontrol.models.document import InstructionKind, OptionKind, OptionOperator


class OptionSpec(BaseModel):
    """A recognised option key inside an instruction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str
    kind: OptionKind = OptionKind.SINGLE
    preferred_operator: OptionOperator | None = Field(None, alias="preferredOperator")
    description: str = ""


class InstructionSpec(BaseModel):
    """A recognised ``$instruction`` and the options valid in its body."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: InstructionKind = InstructionKind.GROUP
    options: tuple[OptionSpec, ...] = ()
    description: str = ""

    _by_key: dict[str, OptionSpec] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: object) -> None:
        self._by_key = {opt.key: opt for opt in self.options}

    def get_option(self, key: str) -> OptionSpec | None:
        return self._by_key.get(key)


class XtbSchema(BaseModel):
    """Ordered, immutable catalog of instruction specs with O(1) lookup by name."""

    model_config = ConfigDict(frozen=True)

    instructions: tuple[InstructionSpec, ...] = ()

    _by_name: dict[str, InstructionSpec] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: object) -> None:
        self._by_name = {spec.name: spec for spec in self.instructions}

    def get(self, name: str) -> InstructionSpec | None:
        return self._by_name.get(name)

    @property
    def names(self) -> list[str]:
        return [spec.name for spec in self.instructions]

    def merged_with(self, specs: Iterable[InstructionSpec]) -> XtbSchema:
        """Return a new schema where *specs* replace same-named entries or are appended."""
        overrides = {spec.name: spec for spec in specs}
        merged = [overrides.pop(spec.name, spec) for spec in self.instructions]
        merged.extend(overrides.values())
        return XtbSchema(instructions=tuple(merged))


def find_instruction_spec(schema: XtbSchema, name: str) -> InstructionSpec | None:
    return schema.get(name)


def find_option_spec(instruction_spec: InstructionSpec, key: str) -> OptionSpec | None:
    return instruction_spec.get_option(key)


# ---------------------------------------------------------------------------
# Built-in catalog
# ---------------------------------------------------------------------------

_EQ = OptionOperator.EQUALS
_COLON = OptionOperator.COLON
_SINGLE = OptionKind.SINGLE
_LIST = OptionKind.LIST


def _opt(key: str, kind: OptionKind, op: OptionOperator, description: str) -> OptionSpec:
    return OptionSpec(key=key, kind=kind, preferred_operator=op, description=description)


def _group(name: str, description: str, *options: OptionSpec) -> InstructionSpec:
    return InstructionSpec(
        name=name, kind=InstructionKind.GROUP, options=options, description=description
    )


def _logical(name: str, description: str) -> InstructionSpec:
    return InstructionSpec(name=name, kind=InstructionKind.LOGICAL, description=description)


DEFAULT_SCHEMA = XtbSchema(
    instructions=(
        _group(
            "fix",
            "Fix atoms or groups during optimization",
            _opt("atoms", _LIST, _COLON, "List of atoms to fix"),
            _opt("elements", _LIST, _COLON, "Element types to fix"),
        ),
        _group(
            "constrain",
            "Apply geometric constraints",
            _opt("atoms", _LIST, _COLON, "Atoms involved in constraint"),
            _opt("distance", _LIST, _COLON, "Distance constraint"),
            _opt("angle", _LIST, _COLON, "Angle constraint"),
            _opt("dihedral", _LIST, _COLON, "Dihedral angle constraint"),
        ),
        _group(
            "wall",
            "Define confining potential",
            _opt("potential", _SINGLE, _EQ, "Potential type"),
            _opt("sphere", _SINGLE, _COLON, "Spherical wall parameters"),
            _opt("ellipsoid", _SINGLE, _COLON, "Ellipsoidal wall parameters"),
            _opt("alpha", _SINGLE, _EQ, "Alpha parameter"),
            _opt("beta", _SINGLE, _EQ, "Beta parameter"),
            _opt("temp", _SINGLE, _EQ, "Temperature"),
        ),
        _group(
            "write",
            "Control output file generation",
            _opt("charges", _SINGLE, _EQ, "Write atomic charges"),
            _opt("wiberg", _SINGLE, _EQ, "Write Wiberg bond orders"),
            _opt("distances", _SINGLE, _EQ, "Write distances"),
            _opt("gbsa", _SINGLE, _EQ, "Write GBSA information"),
            _opt("gfn2", _SINGLE, _EQ, "Write GFN2 information"),
        ),
        _group(
            "opt",
            "Optimization settings",
            _opt("maxcycle", _SINGLE, _EQ, "Maximum optimization cycles"),
            _opt("microcycle", _SINGLE, _EQ, "Maximum micro cycles"),
            _opt("engine", _SINGLE, _EQ, "Optimization engine (rf, lbfgs)"),
            _opt("optlevel", _SINGLE, _COLON, "Optimization level"),
            _opt("logfile", _SINGLE, _EQ, "Log file name"),
        ),
        _group(
            "scan",
            "Coordinate scanning",
            _opt("distance", _LIST, _COLON, "Distance to scan"),
            _opt("angle", _LIST, _COLON, "Angle to scan"),
            _opt("dihedral", _LIST, _COLON, "Dihedral to scan"),
            _opt("start", _SINGLE, _EQ, "Start value"),
            _opt("end", _SINGLE, _EQ, "End value"),
            _opt("steps", _SINGLE, _EQ, "Number of steps"),
        ),
        _group(
            "hess",
            "Hessian calculation settings",
            _opt("sccacc", _SINGLE, _EQ, "SCC accuracy"),
        ),
        _group(
            "gfn",
            "GFN method settings",
            _opt("method", _SINGLE, _EQ, "GFN method (gfn1, gfn2, gfnff)"),
        ),
        _group(
            "metadyn",
            "Metadynamics settings",
            _opt("atoms", _LIST, _COLON, "Atoms for metadynamics"),
            _opt("kpush", _SINGLE, _EQ, "Push strength"),
            _opt("alpha", _SINGLE, _EQ, "Alpha parameter"),
        ),
        _group(
            "scc",
            "Self-consistent charge settings",
            _opt("maxiter", _SINGLE, _EQ, "Maximum SCC iterations"),
        ),
        _logical("chrg", "Set molecular charge"),
        _logical("spin", "Set spin state"),
        _logical("cmd", "Specify command"),
        _logical("date", "Date information"),
        InstructionSpec(
            name="end",
            kind=InstructionKind.END,
            description="End marker for group instructions",
        ),
    )
)
