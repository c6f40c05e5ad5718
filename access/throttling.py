from rest_framework.throttling import AnonRateThrottle, UserRateThrottle


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


class OtpVerifyRateThrottle(UserRateThrottle):
    """Caps OTP guesses per caller; there is no per-request attempt counter."""
    scope = 'otp_verify'
