"""
microbench - Micro-benchmark Harness

Measures the wall-clock cost of procedures across configurations
(problem sizes) and reports the results as time per run or throughput.

Main APIs:
- mb.sweep(): Measure every (procedure, configuration) pair
- mb.Runner: Timing protocol with explicit configuration
- mb.format_table() / mb.write_csv(): Render a ResultTable
- mb.configure() / mb.load_config(): Process-wide defaults

Example:
    import microbench as mb

    procs = mb.elementwise_procedures(["sqrt", "exp"])
    table = mb.sweep(procs, [1024, 65536], mb.RunConfig(target_duration_s=0.2))
    print(mb.format_table(table, mb.Unit.MILLION_ITEMS_PER_SECOND))
"""

__version__ = "0.1.0"

from microbench.config import (
    RunConfig,
    configure,
    get_config,
    load_config,
)
from microbench.exceptions import (
    ConfigurationError,
    DuplicateProcedureError,
    MeasurementError,
    MicrobenchError,
    ResultTableError,
    SetupError,
    StepError,
    SweepCancelledError,
    TeardownError,
    ValidityCheckError,
)
from microbench.measurement import (
    Marker,
    Measurement,
    Unit,
    UnitKind,
)
from microbench.payloads import (
    ELEMENTWISE_OPS,
    ElementwiseProcedure,
    elementwise_procedures,
)
from microbench.procedure import (
    FunctionProcedure,
    Procedure,
)
from microbench.reporter import (
    display_grid,
    format_table,
    parse_grid,
    read_csv,
    write_csv,
)
from microbench.results import ResultTable
from microbench.runner import (
    Runner,
    repetitions_for,
    sweep,
    time_loop,
)

__all__ = [
    "__version__",
    # Configuration
    "RunConfig",
    "configure",
    "get_config",
    "load_config",
    # Errors
    "MicrobenchError",
    "ConfigurationError",
    "DuplicateProcedureError",
    "ResultTableError",
    "MeasurementError",
    "SetupError",
    "StepError",
    "TeardownError",
    "ValidityCheckError",
    "SweepCancelledError",
    # Model
    "Procedure",
    "FunctionProcedure",
    "Measurement",
    "Marker",
    "Unit",
    "UnitKind",
    "ResultTable",
    # Runner
    "Runner",
    "sweep",
    "time_loop",
    "repetitions_for",
    # Reporting
    "display_grid",
    "format_table",
    "write_csv",
    "read_csv",
    "parse_grid",
    # Payloads
    "ELEMENTWISE_OPS",
    "ElementwiseProcedure",
    "elementwise_procedures",
]
