"""Schema-driven diagnostic rules R1–R6.

Each rule is a plain function that returns early when its level is ``off``,
before touching the schema.  ``validate`` runs all of them in a fixed order:
orphans first, then per instruction R1, R6, R4 and per option R2, R3.
"""

from __future__ import annotations

from xcontrol.models.diagnostics import Diagnostic, DiagnosticConfig, RuleCode, RuleLevel
from xcontrol.models.document import (
    InstructionKind,
    InstructionNode,
    OptionKind,
    OptionNode,
    ParsedDocument,
    Range,
)
from xcontrol.schema import XtbSchema


def _diagnostic(message: str, range_: Range, level: RuleLevel, code: RuleCode) -> Diagnostic:
    return Diagnostic(severity=level.severity, range=range_, message=message, code=code)


def check_unknown_instruction(
    instruction: InstructionNode, schema: XtbSchema, config: DiagnosticConfig
) -> Diagnostic | None:
    """R1: instruction name is not in the schema."""
    if not config.unknown_instruction.enabled:
        return None
    if schema.get(instruction.base_name) is not None:
        return None
    return _diagnostic(
        f"Unknown instruction '{instruction.name}'. "
        f"This instruction is not recognized in the xTB schema.",
        instruction.range,
        config.unknown_instruction,
        RuleCode.UNKNOWN_INSTRUCTION,
    )


def check_unknown_option(
    instruction: InstructionNode,
    option: OptionNode,
    schema: XtbSchema,
    config: DiagnosticConfig,
) -> Diagnostic | None:
    """R2: option key is not valid for a known instruction."""
    if not config.unknown_option.enabled:
        return None
    spec = schema.get(instruction.base_name)
    if spec is None:
        # Reported once by R1 instead.
        return None
    if spec.get_option(option.key) is not None:
        return None
    return _diagnostic(
        f"Unknown option '{option.key}' for instruction '{instruction.name}'. "
        f"This option is not recognized.",
        option.range,
        config.unknown_option,
        RuleCode.UNKNOWN_OPTION,
    )


def check_suspicious_operator(
    instruction: InstructionNode,
    option: OptionNode,
    schema: XtbSchema,
    config: DiagnosticConfig,
) -> Diagnostic | None:
    """R3: option uses ``=`` where ``:`` is preferred, or the reverse."""
    if not config.suspicious_operator.enabled:
        return None
    spec = schema.get(instruction.base_name)
    if spec is None:
        return None
    option_spec = spec.get_option(option.key)
    if option_spec is None or option_spec.preferred_operator is None:
        return None
    if option.operator == option_spec.preferred_operator:
        return None
    return _diagnostic(
        f"Suspicious operator '{option.operator}' for option '{option.key}'. "
        f"The preferred operator is '{option_spec.preferred_operator}'.",
        option.range,
        config.suspicious_operator,
        RuleCode.SUSPICIOUS_OPERATOR,
    )


def check_duplicate_options(
    instruction: InstructionNode, schema: XtbSchema, config: DiagnosticConfig
) -> list[Diagnostic]:
    """R4: single-valued option repeated; every occurrence after the first is flagged."""
    if not config.duplicate_option.enabled:
        return []
    spec = schema.get(instruction.base_name)
    if spec is None:
        return []

    occurrences: dict[str, list[OptionNode]] = {}
    for option in instruction.options:
        occurrences.setdefault(option.key, []).append(option)

    diagnostics: list[Diagnostic] = []
    for key, options in occurrences.items():
        if len(options) < 2:
            continue
        option_spec = spec.get_option(key)
        if option_spec is None or option_spec.kind != OptionKind.SINGLE:
            continue
        for option in options[1:]:
            diagnostics.append(
                _diagnostic(
                    f"Duplicate option '{key}'. "
                    f"This option should only appear once in '{instruction.name}'.",
                    option.range,
                    config.duplicate_option,
                    RuleCode.DUPLICATE_OPTION,
                )
            )
    return diagnostics


def check_orphan_options(document: ParsedDocument, config: DiagnosticConfig) -> list[Diagnostic]:
    """R5: option outside any instruction block."""
    if not config.orphan_option.enabled:
        return []
    return [
        _diagnostic(
            f"Orphan option '{option.key}'. Options must appear inside an instruction block.",
            option.range,
            config.orphan_option,
            RuleCode.ORPHAN_OPTION,
        )
        for option in document.orphan_options
    ]


def check_missing_end(
    instruction: InstructionNode, config: DiagnosticConfig
) -> Diagnostic | None:
    """R6: group instruction closed implicitly instead of by ``$end``."""
    if not config.missing_end.enabled:
        return None
    if instruction.kind != InstructionKind.GROUP or instruction.has_explicit_end:
        return None
    return _diagnostic(
        f"Group instruction '{instruction.name}' is not terminated with '$end'. "
        f"Consider adding '$end' for clarity.",
        instruction.range,
        config.missing_end,
        RuleCode.MISSING_END,
    )


def validate(
    document: ParsedDocument, schema: XtbSchema, config: DiagnosticConfig
) -> list[Diagnostic]:
    """Run every enabled rule over *document*.  Pure: no I/O, no hidden state."""
    diagnostics = check_orphan_options(document, config)

    for instruction in document.instructions:
        r1 = check_unknown_instruction(instruction, schema, config)
        if r1 is not None:
            diagnostics.append(r1)

        r6 = check_missing_end(instruction, config)
        if r6 is not None:
            diagnostics.append(r6)

        diagnostics.extend(check_duplicate_options(instruction, schema, config))

        for option in instruction.options:
            r2 = check_unknown_option(instruction, option, schema, config)
            if r2 is not None:
                diagnostics.append(r2)
            r3 = check_suspicious_operator(instruction, option, schema, config)
            if r3 is not None:
                diagnostics.append(r3)

    return diagnostics


class DiagnosticEngine:
    """Binds a schema and a config so hosts can validate documents repeatedly."""

    def __init__(self, schema: XtbSchema, config: DiagnosticConfig) -> None:
        self.schema = schema
        self.config = config

    def validate(self, document: ParsedDocument) -> list[Diagnostic]:
        return validate(document, self.schema, self.config)
