'''
Market Signal Analytics Engine Test Suite

Test Modules:
-------------
- test_scoring.py: normalize / weighted composite / grade framework,
  weight-table validation, largest-remainder percentages
- test_config.py: settings defaults, environment overrides, ConfigError
- test_trending.py: trending composite, sub-score saturation, signals
- test_volatility.py: CV, grades, fallback series, measured patterns
- test_retention.py: retention index, engagement composite, insights
- test_text_classifier.py: lexicon matching modes, weights, tie-breaks
- test_persona.py: Player Spectrum classification and distribution
- test_core_fun.py: fun category scores, highlights, evidence thresholds
- test_streaming_correlation.py: Pearson, lag, elasticity, sparse data
- test_serialization.py: JSON round trip of result records

Running Tests:
--------------
    pip install -e ".[test]"
    pytest market_signals/tests/ -v
'''
