import configparser
import os

class Config:
    """
    Run configuration read from an INI file.

    Values are stored as plain attributes named after their INI key
    (e.g. 'population_size', 'prb_add_link'). Algorithms look up their
    tunables through the Parameter enum, which maps each parameter onto
    one of these attributes.

    Sections:
        EXPERIMENT: num_inputs, num_outputs, bias, experiment_id
        POPULATION: population_size, max_evaluations
        VARIATION:  weight mutation range and variation probabilities
        SELECTION:  replacement_rate, selection_pressure, prb_crossover_interspecies
        SPECIATION: maximum_stagnation, speciation_coefficient, difference factors
        OUTPUT:     output_dir
    """

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, every value takes its default.
        """

        # Default config for testing/manual setup
        if config_file is None:

            # Experiment
            self.num_inputs    = 2
            self.num_outputs   = 1
            self.bias          = True
            self.experiment_id = 0

            # Population
            self.population_size = 100
            self.max_evaluations = 10000

            # Variation
            self.weight_mutation_range         = 2.5
            self.prb_mutation                  = 0.8
            self.prb_crossover                 = 0.75
            self.prb_cross_gene_by_choosing    = 0.6
            self.prb_modify_weight             = 0.25
            self.prb_add_neuron                = 0.03
            self.prb_add_link                  = 0.05
            self.prb_remove_link               = 0.05
            self.prb_gene_enabled_on_crossover = 0.001

            # Selection
            self.replacement_rate           = 0.5
            self.selection_pressure         = 0.8
            self.prb_crossover_interspecies = 0.001

            # Speciation
            self.maximum_stagnation          = 15
            self.speciation_coefficient      = 0.5
            self.factor_c1_excess            = 1.0
            self.factor_c2_disjoint          = 1.0
            self.factor_c3_weight_difference = 0.4

            # Output
            self.output_dir = '.'

            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [EXPERIMENT]
        self.num_inputs    = get_value('EXPERIMENT', 'num_inputs',    int)
        self.num_outputs   = get_value('EXPERIMENT', 'num_outputs',   int)
        self.bias          = get_value('EXPERIMENT', 'bias',          bool, True)
        self.experiment_id = get_value('EXPERIMENT', 'experiment_id', int,  0)

        # [POPULATION]
        self.population_size = get_value('POPULATION', 'population_size', int)
        self.max_evaluations = get_value('POPULATION', 'max_evaluations', int)

        # [VARIATION]
        self.weight_mutation_range         = get_value('VARIATION', 'weight_mutation_range',         float, 2.5)
        self.prb_mutation                  = get_value('VARIATION', 'prb_mutation',                  float, 0.8)
        self.prb_crossover                 = get_value('VARIATION', 'prb_crossover',                 float, 0.75)
        self.prb_cross_gene_by_choosing    = get_value('VARIATION', 'prb_cross_gene_by_choosing',    float, 0.6)
        self.prb_modify_weight             = get_value('VARIATION', 'prb_modify_weight',             float, 0.25)
        self.prb_add_neuron                = get_value('VARIATION', 'prb_add_neuron',                float, 0.03)
        self.prb_add_link                  = get_value('VARIATION', 'prb_add_link',                  float, 0.05)
        self.prb_remove_link               = get_value('VARIATION', 'prb_remove_link',               float, 0.05)
        self.prb_gene_enabled_on_crossover = get_value('VARIATION', 'prb_gene_enabled_on_crossover', float, 0.001)

        # [SELECTION]
        self.replacement_rate           = get_value('SELECTION', 'replacement_rate',           float, 0.5)
        self.selection_pressure         = get_value('SELECTION', 'selection_pressure',         float, 0.8)
        self.prb_crossover_interspecies = get_value('SELECTION', 'prb_crossover_interspecies', float, 0.001)

        # [SPECIATION]
        self.maximum_stagnation          = get_value('SPECIATION', 'maximum_stagnation',          int,   15)
        self.speciation_coefficient      = get_value('SPECIATION', 'speciation_coefficient',      float, 0.5)
        self.factor_c1_excess            = get_value('SPECIATION', 'factor_c1_excess',            float, 1.0)
        self.factor_c2_disjoint          = get_value('SPECIATION', 'factor_c2_disjoint',          float, 1.0)
        self.factor_c3_weight_difference = get_value('SPECIATION', 'factor_c3_weight_difference', float, 0.4)

        # [OUTPUT]
        self.output_dir = get_value('OUTPUT', 'output_dir', str, '.')
