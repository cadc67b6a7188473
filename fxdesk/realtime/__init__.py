"""
Real-time price feed.

- PriceStreamManager: subscriber registry and snapshot fan-out
- PriceFeedScheduler: periodic quote simulation job
"""
