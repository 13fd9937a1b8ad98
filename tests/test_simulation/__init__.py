"""
Tests for the Simulation Module

Test modules:
    - test_models: Tests for engine settings and result models
    - test_settings: Tests for the YAML settings loader
    - test_form: Tests for the form calculator
    - test_strength: Tests for the effective strength model
    - test_match: Tests for the basic match simulator
    - test_enhanced: Tests for the enhanced match simulator
    - test_standings: Tests for the standings engine
    - test_predictions: Tests for the prediction ensemble
    - test_analytics: Tests for week and season analytics
    - test_runner: Tests for the season runner
"""
