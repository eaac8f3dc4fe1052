#############################################################
### (0) import
import logging

from rest_framework import viewsets, status
from rest_framework.views import APIView
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated

# JWT
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.exceptions import TokenError, InvalidToken

from drf_yasg.utils import swagger_auto_schema

from django.contrib.auth import authenticate
from django.contrib.auth import get_user_model

from .serializers import (
    SignupSerializer,
    UserSerializer,
    PasswordChangeSerializer,
    WhatsAppSendSerializer,
    WhatsAppVerifySerializer,
)
from .services.whatsapp_auth import VerificationError, send_verification_code, verify_code

logger = logging.getLogger("accounts")

User = get_user_model()


def _auth_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        "tokenType": "Bearer",
        "accessToken": str(refresh.access_token),
        "refreshToken": str(refresh),
    }


###############################################################
### (1) Account
class AccountViewSet(viewsets.GenericViewSet):
    serializer_class = UserSerializer
    queryset = User.objects.filter(is_active=True)

    def get_permissions(self):
        if self.action in ['signup', 'login']:
            permission_classes = [AllowAny]
        else:
            permission_classes = [IsAuthenticated]
        return [permission() for permission in permission_classes]

    @swagger_auto_schema(request_body=SignupSerializer)
    @action(detail=False, methods=['post'])
    def signup(self, request):
        serializer = SignupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("New shop owner account %s", user.email)
        return Response({
            "user": UserSerializer(user).data,
            "auth": _auth_payload(user),
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def login(self, request):
        email = request.data.get('email')
        password = request.data.get('password')
        user = authenticate(request, email=email, password=password)

        if user is not None:
            return Response({
                "user": UserSerializer(user).data,
                "auth": _auth_payload(user),
            })
        return Response({"detail": "E-mail ou mot de passe incorrect."},
                        status=status.HTTP_401_UNAUTHORIZED)

    @action(detail=False, methods=['get', 'patch'])
    def me(self, request):
        if request.method == 'PATCH':
            serializer = UserSerializer(request.user, data=request.data, partial=True)
            serializer.is_valid(raise_exception=True)
            serializer.save()
            return Response(serializer.data)
        return Response(UserSerializer(request.user).data)

    @swagger_auto_schema(request_body=PasswordChangeSerializer)
    @action(detail=False, methods=['post'])
    def password(self, request):
        serializer = PasswordChangeSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({"detail": "Mot de passe modifié."}, status=status.HTTP_200_OK)


######################################################################
### (2) Logout: blacklist the refresh token
class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        refresh_token = request.data.get("refresh")
        if refresh_token is None:
            return Response({"detail": "Le refresh token est requis."}, status=status.HTTP_400_BAD_REQUEST)

        try:
            token = RefreshToken(refresh_token)
            token.blacklist()
        except (TokenError, InvalidToken):
            return Response({"detail": "Token invalide."}, status=status.HTTP_400_BAD_REQUEST)

        return Response({"detail": "Déconnexion réussie."}, status=status.HTTP_205_RESET_CONTENT)


######################################################################
### (3) WhatsApp phone verification
class WhatsAppSendView(APIView):
    permission_classes = [AllowAny]

    @swagger_auto_schema(request_body=WhatsAppSendSerializer)
    def post(self, request):
        serializer = WhatsAppSendSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = send_verification_code(serializer.validated_data["phone_number"])
        except VerificationError as e:
            return Response({"success": False, "message": e.message}, status=e.status_code)

        return Response({"success": True, **result}, status=status.HTTP_200_OK)


class WhatsAppVerifyView(APIView):
    permission_classes = [AllowAny]

    @swagger_auto_schema(request_body=WhatsAppVerifySerializer)
    def post(self, request):
        serializer = WhatsAppVerifySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            user_data = verify_code(
                serializer.validated_data["phone_number"],
                serializer.validated_data["code"],
            )
        except VerificationError as e:
            return Response({"success": False, "message": e.message}, status=e.status_code)

        # attach the number to the caller, or sign in the account that owns it
        if request.user.is_authenticated:
            user = request.user
            user.phone = user_data["phone"]
        else:
            # only an account that already proved this number can sign in with it
            user = (
                User.objects.filter(phone=user_data["phone"], is_active=True, phone_verified_at__isnull=False)
                .order_by("-phone_verified_at")
                .first()
            )

        response = {
            "success": True,
            "message": "Code vérifié avec succès",
            "whatsapp_verified": True,
            "user_data": user_data,
        }
        if user is not None:
            user.phone_verified_at = user_data["verified_at"]
            user.save(update_fields=["phone", "phone_verified_at"])
            response["user"] = UserSerializer(user).data
            if not request.user.is_authenticated:
                response["auth"] = _auth_payload(user)

        return Response(response, status=status.HTTP_200_OK)
