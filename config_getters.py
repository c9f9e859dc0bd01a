# -*- coding: utf-8 -*-
"""
Created on Thu Nov  7 11:45:02 2024

Loader configuration getters. Built-in defaults can be overridden with a YAML
file, either passed explicitly or pointed to by the INSTRUMENT_LOADERS_CONFIG
environment variable. Expected YAML layout:

    loaders:
        STR:
            max_depth: 9999
        TOA5:
            max_depth: 2
            string_columns: ['Comment']
            integer_columns: []
            time_columns: []
"""

import copy
import os
import pathlib

import yaml

#------------------------------------------------------------------------------
### CONSTANTS ###
#------------------------------------------------------------------------------

CONFIG_ENV_VAR = 'INSTRUMENT_LOADERS_CONFIG'
DEFAULT_CONFIGS = {
    'STR': {
        'max_depth': 9999,
        'string_columns': [],
        'integer_columns': [],
        'time_columns': []
        },
    'TOA5': {
        'max_depth': 2,
        'string_columns': [],
        'integer_columns': [],
        'time_columns': []
        }
    }

#------------------------------------------------------------------------------
### FUNCTIONS ###
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def get_loader_configs(file_type, config_file=None):
    """
    Get the loader configuration for the file type.

    Args:
        file_type: "STR" or "TOA5".
        config_file (optional): YAML file with overrides. If None, the file
            named by the INSTRUMENT_LOADERS_CONFIG environment variable is
            used (if set).

    Returns:
        Configuration dictionary (defaults overlaid with file content).

    """

    if not file_type in DEFAULT_CONFIGS:
        raise NotImplementedError(f'Format {file_type} is not implemented!')
    configs = copy.deepcopy(DEFAULT_CONFIGS[file_type])
    configs.update(_get_file_configs(config_file=config_file).get(file_type, {}))
    return configs
#------------------------------------------------------------------------------

#------------------------------------------------------------------------------
def _get_file_configs(config_file=None):

    if config_file is None:
        config_file = os.environ.get(CONFIG_ENV_VAR)
    if not config_file:
        return {}
    file = pathlib.Path(config_file)
    if not file.exists():
        raise FileNotFoundError(f'Config file {file} does not exist!')
    with open(file) as f:
        content = yaml.safe_load(stream=f) or {}
    return content.get('loaders', {}) or {}
#------------------------------------------------------------------------------
