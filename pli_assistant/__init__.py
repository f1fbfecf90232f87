"""PLI Santosh premium calculator with a realtime voice assistant"""
