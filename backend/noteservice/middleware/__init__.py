"""
Note Service: Middleware Package
==================================

    Request → [AccessLog: request id, timing, failure kind] → Route Handler
"""
