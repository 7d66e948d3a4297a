"""
Control Parameters Module

This module declares every tunable of the evolutionary algorithms and the
Parameterized base class through which the algorithms register and query them.

Classes:
    ParameterScope: How often a parameter value may change during a run
    Parameter:      Enumeration of all tunables with their value ranges
    ParameterError: Raised on misuse of a Parameterized object
    Parameterized:  Registry of parameter values for one algorithm instance
"""

from enum import Enum

from moneat.run.config import Config

class ParameterScope(Enum):
    """Update interval a parameter value may change at."""
    OPERATION    = 'operation'     # after each variation operation
    GENERATION   = 'generation'    # after each epoch
    INSTANCE     = 'instance'      # fixed for the whole run
    USER_DEFINED = 'user_defined'  # set by the user, never driven externally

class Parameter(Enum):
    """
    A tunable of the evolutionary process.

    Each member carries (short id, scope, min, max, default, precision). For user-defined
    parameters min and max are meaningless and the default comes from the Config.
    The Config attribute holding a parameter's value is the lowercase member name.
    """

    #                               id     scope                         min    max     default  precision
    Population_Size               = ('PS',  ParameterScope.USER_DEFINED,  0.0,   0.0,    100.0,   0)
    Max_Evaluations               = ('MT',  ParameterScope.USER_DEFINED,  0.0,   0.0,    10000.0, 0)
    Weight_Mutation_Range         = ('WMR', ParameterScope.OPERATION,     0.1,   3.5,    2.5,     5)
    Prb_Mutation                  = ('MP',  ParameterScope.OPERATION,     0.1,   0.9,    0.8,     5)
    Prb_Crossover                 = ('CP',  ParameterScope.OPERATION,     0.1,   0.9,    0.75,    5)
    Prb_Cross_Gene_By_Choosing    = ('CGC', ParameterScope.OPERATION,     0.25,  0.75,   0.6,     5)
    Prb_Modify_Weight             = ('MWP', ParameterScope.OPERATION,     0.001, 0.5,    0.25,    5)
    Prb_Add_Neuron                = ('ANP', ParameterScope.OPERATION,     0.001, 0.25,   0.03,    5)
    Prb_Add_Link                  = ('ALP', ParameterScope.OPERATION,     0.001, 0.25,   0.05,    5)
    Prb_Remove_Link               = ('RLP', ParameterScope.OPERATION,     0.001, 0.1,    0.05,    5)
    Prb_Gene_Enabled_On_Crossover = ('GEP', ParameterScope.OPERATION,     0.001, 0.1,    0.001,   5)
    Replacement_Rate              = ('RR',  ParameterScope.GENERATION,    0.0,   0.9,    0.5,     5)
    Selection_Pressure            = ('SP',  ParameterScope.GENERATION,    0.001, 1.0,    0.8,     5)
    Prb_Crossover_Interspecies    = ('ICP', ParameterScope.GENERATION,    0.001, 0.1,    0.001,   5)
    Maximum_Stagnation            = ('MS',  ParameterScope.INSTANCE,      15.0,  1000.0, 15.0,    0)
    Speciation_Coefficient        = ('SC',  ParameterScope.GENERATION,    0.0,   1.0,    0.5,     5)
    Factor_C1_Excess              = ('C1',  ParameterScope.INSTANCE,      0.1,   1.0,    1.0,     5)
    Factor_C2_Disjoint            = ('C2',  ParameterScope.INSTANCE,      0.1,   1.0,    1.0,     5)
    Factor_C3_Weight_Difference   = ('C3',  ParameterScope.INSTANCE,      0.1,   1.0,    0.4,     5)

    def __init__(self,
                 short_id : str,
                 scope    : ParameterScope,
                 min_value: float,
                 max_value: float,
                 default  : float,
                 precision: int):
        self.short_id : str            = short_id
        self.scope    : ParameterScope = scope
        self.min_value: float          = min_value
        self.max_value: float          = max_value
        self.default  : float          = default
        self.precision: int            = precision

    @property
    def config_key(self) -> str:
        """Name of the Config attribute holding this parameter's value."""
        return self.name.lower()

    @property
    def bounded(self) -> bool:
        return self.scope != ParameterScope.USER_DEFINED

    def from_relative(self, value: float) -> float:
        """
        Map a relative value in [0, 1] onto the parameter's absolute range.

        Parameters:
            value: Relative value; 0 maps to 'min_value', 1 to 'max_value'

        Returns:
            Absolute value, rounded to the parameter's precision
        """
        return round(self.min_value + (self.max_value - self.min_value) * value, self.precision)

class ParameterError(Exception):
    """Raised when a Parameterized object is used incorrectly (a setup mistake, never a runtime condition)."""
    pass

class Parameterized:
    """
    Stores the values of the parameters an object has registered.

    Usage follows a strict two-phase protocol: parameters are registered first
    (values come from the Config unless given explicitly), then registration is
    closed by 'finalize_registration()'. Only afterwards may values be queried
    or overridden, and only for registered parameters.

    Public Methods:
        register(parameter, value):    Register a parameter
        finalize_registration():       Close registration
        get(parameter):                Absolute value of a registered parameter
        get_as_int(parameter):         Value of an integral parameter
        set(parameter, value):         Override the absolute value
        set_relative(parameter, value): Override via a relative value in [0, 1]
        registered_parameters(*scopes): Registered parameters with the given scopes
    """

    def __init__(self, config: Config):
        """
        Parameters:
            config: Supplies the values of registered parameters
        """
        self._config    : Config                  = config
        self._parameters: dict[Parameter, float]  = {}
        self._finalized : bool                    = False

    def register(self, parameter: Parameter, value: float | None = None) -> None:
        """
        Register a parameter.

        Parameters:
            parameter: The parameter to register
            value:     Explicit value; if None, the value is read from the Config
                       (falling back to the parameter's default)
        """
        if self._finalized:
            raise ParameterError(f"Cannot register '{parameter.name}': registration has been finalized")

        if value is None:
            value = getattr(self._config, parameter.config_key, None)
        if value is None:
            value = parameter.default
        self._parameters[parameter] = float(value)

    def finalize_registration(self) -> None:
        self._finalized = True

    def get(self, parameter: Parameter) -> float:
        if not self._finalized:
            raise ParameterError(f"Cannot query '{parameter.name}': registration has not been finalized")
        if parameter not in self._parameters:
            raise ParameterError(f"Parameter '{parameter.name}' has not been registered")
        return self._parameters[parameter]

    def get_as_int(self, parameter: Parameter) -> int:
        return int(round(self.get(parameter)))

    def set(self, parameter: Parameter, value: float) -> None:
        """
        Override the value of a registered parameter.

        Bounded parameters must stay within [min_value, max_value].
        """
        # Validates finalization and registration
        self.get(parameter)

        if parameter.bounded and not (parameter.min_value <= value <= parameter.max_value):
            raise ParameterError(f"Value {value} for '{parameter.name}' outside "
                                 f"[{parameter.min_value}, {parameter.max_value}]")
        self._parameters[parameter] = float(value)

    def set_relative(self, parameter: Parameter, value: float) -> None:
        """Override a bounded parameter with a relative value in [0, 1]."""
        if not parameter.bounded:
            raise ParameterError(f"Parameter '{parameter.name}' is user defined and has no relative range")
        if not 0.0 <= value <= 1.0:
            raise ParameterError(f"Relative value {value} for '{parameter.name}' outside [0, 1]")
        self.set(parameter, parameter.from_relative(value))

    def registered_parameters(self, *scopes: ParameterScope) -> list[Parameter]:
        """
        Return the registered parameters, optionally filtered by scope.

        Parameters:
            scopes: Scopes to include; all scopes if none given

        Returns:
            Registered parameters in declaration order
        """
        return [p for p in Parameter if p in self._parameters and (not scopes or p.scope in scopes)]
