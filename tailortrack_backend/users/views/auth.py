# users/views/auth.py
"""
USER AUTH VIEWS

- Register: public customer signup
- Login: email OR username; opens a session (cookie clients) and returns a JWT pair
- Logout: ends the session

Throttling: register/login use the anon scope.
"""

from __future__ import annotations

import logging

from django.contrib.auth import authenticate, login, logout
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from users.serializers import LoginSerializer, RegisterSerializer, UserSerializer

logger = logging.getLogger(__name__)


class AuthAnonThrottle(AnonRateThrottle):
    scope = "anon"


def _token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class RegisterView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [AuthAnonThrottle]

    @extend_schema(
        request=RegisterSerializer,
        responses={201: UserSerializer, 400: OpenApiResponse(description="Validation error")},
        description="Register a new customer account",
    )
    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info("Customer registered", extra={"user_id": str(user.id)})
        return Response(
            {
                "message": "Registration successful",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [AuthAnonThrottle]

    @extend_schema(
        request=LoginSerializer,
        responses={200: dict, 401: OpenApiResponse(description="Invalid credentials")},
        description="Authenticate with email, username or phone and password",
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request._request,
            username=serializer.validated_data["identifier"],
            password=serializer.validated_data["password"],
        )
        if not user:
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        login(request._request, user)
        logger.info("User logged in", extra={"user_id": str(user.id), "role": user.role})

        return Response(
            {
                "message": "Login successful",
                "user": UserSerializer(user).data,
                **_token_pair(user),
            },
            status=status.HTTP_200_OK,
        )


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: dict}, description="End the current session")
    def post(self, request):
        logout(request._request)
        return Response({"message": "Logout successful"}, status=status.HTTP_200_OK)
