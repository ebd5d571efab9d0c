# --- Start & Help ---
WELCOME_MESSAGE = (
    "🏋️ Welcome to your training diary!\n\n"
    "Use the menu buttons below or these commands:\n"
    "/add - Log an exercise\n"
    "/addset - Add a set to an exercise you did today\n"
    "/history - Review your training history\n"
    "/create - Create a new exercise\n\n"
    "Start by logging an exercise!"
)
HELP_MESSAGE = (
    "Use the menu buttons or these commands:\n"
    "/add - Log an exercise\n"
    "/addset - Add a set\n"
    "/history - Review your history\n"
    "/create - Create a new exercise\n"
    "/cancel - Abort the current action\n"
    "/help - Show this help"
)
CANCEL_MESSAGE = "Cancelled. See you next time!"
NOTHING_TO_CANCEL = "There is nothing to cancel."

# --- Menu labels ---
MENU_ADD_EXERCISE = "📝 Log exercise"
MENU_ADD_SET = "🔄 Add set"
MENU_HISTORY = "📊 History"
MENU_HELP = "ℹ️ Help"

# --- Set logging ---
PROMPT_SELECT_EXERCISE = "Choose an exercise:"
PROMPT_SELECT_TODAYS_EXERCISE = "Choose an exercise to add a set to:"
PROMPT_PICK_FROM_LIST = "Please choose an exercise from the list above, or /cancel."
PROMPT_WEIGHT = "Selected: {exercise_name}{last_set}\n\nEnter the weight (kg):"
LAST_SET_INFO = "\nLast set: {weight}kg × {reps} reps"
PROMPT_REPS = "Enter the number of reps:"
ERROR_INVALID_WEIGHT = "Please enter a valid weight (a number greater than 0):"
ERROR_INVALID_REPS = "Please enter a valid number of reps (a whole number greater than 0):"
EXERCISE_SAVED = "✅ Exercise logged!\n\n{exercise_name}: {weight}kg × {reps} reps"
SET_SAVED = "✅ Set added!\n\n{exercise_name} - Set {set_number}: {weight}kg × {reps} reps"
TODAY_EXERCISE_LABEL = "{exercise_name} ({set_count} sets)"
ADD_NEW_EXERCISE_LABEL = "➕ Log another exercise"
ADD_NEW_EXERCISE_HINT = "Use /add to log a new exercise, or /create to add one to the catalog."
NO_EXERCISES_TODAY = "You haven't logged any exercises today. Start with /add."
EMPTY_CATALOG = "The exercise catalog is empty. Create one with /create."

# --- Exercise creation ---
PROMPT_EXERCISE_NAME = "Enter the name of the new exercise:"
PROMPT_EXERCISE_CATEGORY = "Enter the exercise category (e.g. Chest, Back, Legs, Arms):"
ERROR_NAME_TOO_SHORT = "The name must be at least 2 characters long. Try again:"
ERROR_NAME_TAKEN = "An exercise with this name already exists. Enter a different name:"
ERROR_CATEGORY_TOO_SHORT = "The category must be at least 2 characters long. Try again:"
EXERCISE_CREATED = '✅ Exercise "{name}" (category: {category}) created!'

# --- History ---
PROMPT_HISTORY_PERIOD = "Choose a period to review:"
HISTORY_TODAY = "Today"
HISTORY_YESTERDAY = "Yesterday"
HISTORY_WEEK_AGO = "A week ago"
HISTORY_CUSTOM_DATE = "Pick a date"
HISTORY_RANGE = "Date range"
PROMPT_DATE = "Enter a date as DD.MM.YYYY (e.g. 22.07.2024):"
PROMPT_RANGE_START = "Enter the start date of the period as DD.MM.YYYY:"
PROMPT_RANGE_END = "Enter the end date of the period as DD.MM.YYYY:"
ERROR_INVALID_DATE = "Invalid date. Use the DD.MM.YYYY format (e.g. 22.07.2024):"
ERROR_END_BEFORE_START = "The end date can't be earlier than the start date. Enter a valid end date:"
TITLE_TODAY = "Workouts for today"
TITLE_YESTERDAY = "Workouts for yesterday"
TITLE_WEEK_AGO = "Workouts a week ago"
TITLE_DAY = "Workouts for {day}"
TITLE_RANGE = "Workouts from {start} to {end}"
NO_WORKOUTS_FOUND = "{title}:\n\nNo workouts found."
HISTORY_DAY_HEADER = "📅 {day}:"
HISTORY_EXERCISE_LINE = "• {exercise_name}:"
HISTORY_SET_LINE = "  • Set {set_number}: {weight}kg × {reps} reps"

# --- Errors ---
ERROR_USER_NOT_FOUND = "I don't know you yet. Please send /start first."
ERROR_EXERCISE_NOT_FOUND = "Exercise not found. Please start again."
ERROR_STALE_BUTTON = "This button is no longer active. Please start again."
ERROR_GENERIC = "Something went wrong. Please try again."
