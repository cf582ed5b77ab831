"""Global constants for the instaclone application."""

# Key of the controller registry in app.extensions
REGISTRY_KEY = "session_registry"

# Flask session keys
SESSION_CONTROLLER_KEY = "controller_key"
SESSION_USER_ID = "user_id"

# Collection names
USERS_COLLECTION = "users"
POSTS_COLLECTION = "posts"

# Storage
IMAGES_PREFIX = "images"

# Fields for 'users' documents
USER_ID = "userId"
USER_NAME = "name"
USER_USERNAME = "userName"
USER_BIO = "bio"
USER_IMAGE_URL = "imageUrl"
USER_FOLLOWING = "following"

# Fields for 'posts' documents
POST_ID = "postId"
POST_USER_ID = "userId"
POST_USERNAME = "username"
POST_USER_IMAGE = "userImage"
POST_IMAGE = "postImage"
POST_DESCRIPTION = "postDescription"
POST_TIME = "time"

# Notification messages
MSG_FILL_ALL_FIELDS = "Please fill in all the fields"
MSG_USERNAME_EXISTS = "Username already exists"
MSG_SIGNUP_FAILED = "Signup failed"
MSG_LOGIN_SUCCESS = "Login success"
MSG_LOGIN_FAILED = "Login failed"
MSG_LOGGED_OUT = "Logged out"
MSG_CANNOT_CHECK_USERNAME = "Cannot check username"
MSG_CANNOT_CREATE_USER = "Cannot create user"
MSG_CANNOT_UPDATE_USER = "Cannot update user"
MSG_CANNOT_RETRIEVE_USER = "Cannot retrieve user data"
MSG_CANNOT_RETRIEVE_POSTS = "Cannot retrieve posts"
MSG_POST_CREATED = "Post successfully created"
MSG_POST_FAILED = "Unable to create post"
MSG_POST_NO_USER = "Error: username unavailable, unable to create post"
MSG_IMAGE_NO_USER = "Error: no signed-in user, unable to update profile image"
