"""
Test Suite for the Meter Telemetry Simulator

This module contains tests for:
- Demand model (test_demand.py)
- Channel synthesis and range generation (test_generator.py)
- Drift scenarios and season profiles (test_drift_scenarios.py)
- Reading-Guard validation (test_validators.py)
- Simulation runner (test_simulation.py)
- API endpoints (test_api.py)

Run tests with:
    pytest tests/ -v
    pytest tests/ --cov=engine --cov=core --cov=api
"""

import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
