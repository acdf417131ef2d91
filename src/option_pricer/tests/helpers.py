"""Reference inputs and values shared across test modules."""

SPOT = 100.0
STRIKE = 100.0
RATE = 0.05
VOL = 0.20
EXPIRY = 1.0

# Black-Scholes reference values for SPOT, STRIKE, RATE, VOL, EXPIRY
BS_CALL = 10.450583572185565
BS_PUT = 5.573526022256971
BS_CALL_DELTA = 0.636830651175619
BS_PUT_DELTA = -0.363169348824381
