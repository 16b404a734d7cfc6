import json

import streamlit as st

from errors import PredictionError
from logsetup import configure_logging
from mainapp import SnowDayPredictor
from profiles import ProfileStore
from scoring import Verdict
from settings import load_config

EXAMPLE_ZIP = "22153"


@st.cache_resource
def get_predictor() -> SnowDayPredictor:
    # one config and one profile table per session
    config = load_config()
    configure_logging(config.logging)
    store = ProfileStore(config.profiles, config.services)
    return SnowDayPredictor(config, profile_store=store)


def render(prediction, bar_max: int):
    verdict = prediction.verdict
    if verdict is Verdict.VERY_LIKELY:
        st.error(f"**{verdict.headline}** | Score: {prediction.score}")
    elif verdict is Verdict.POSSIBLE:
        st.warning(f"**{verdict.headline}** | Score: {prediction.score}")
    else:
        st.success(f"**{verdict.headline}** | Score: {prediction.score}")

    st.progress(min(1.0, prediction.score / bar_max))

    st.markdown("### Why")
    for reason in prediction.reasons:
        st.markdown(f"- {reason}")

    st.markdown("### Weather")
    st.markdown(f"- Location: {prediction.location.label} (ZIP {prediction.zipcode})")
    current = prediction.forecast.current
    if current:
        st.markdown(
            f"- Now: {current.get('temperature')}°F, wind {current.get('windspeed')} km/h, "
            f"weathercode {current.get('weathercode')}"
        )
    day = prediction.forecast.tomorrow
    signals = prediction.signals
    st.markdown(f"- Tomorrow date: {day.get('date')}")
    st.markdown(
        f"- Tomorrow snowfall: {signals.snowfall_amount:g} {signals.snowfall_unit.value} "
        f"({signals.snowfall_inches:.1f} in)"
    )
    st.markdown(f"- Tomorrow min: {day.get('temp_min')}°F, max: {day.get('temp_max')}°F")
    st.markdown(f"- Tomorrow precipitation: {signals.precipitation_volume:g} mm")

    st.markdown("### Local profile")
    if prediction.profile:
        st.code(json.dumps(prediction.profile, indent=2), language="json")
    else:
        st.info("No local profile found. Add an entry to school_trends.json for this ZIP to improve predictions.")


st.set_page_config(page_title="Snow Day Predictor")

st.title("Snow Day Predictor")
st.write("enter yo zipcode")

zipcode = st.text_input("zip code", max_chars=5, placeholder=EXAMPLE_ZIP)

col_calc, col_example = st.columns(2)
calculate = col_calc.button("calculate", type="primary")
example = col_example.button("try example")

if example:
    zipcode = EXAMPLE_ZIP

if calculate or example:
    if not zipcode or len(zipcode) != 5 or not zipcode.isdigit():
        st.error("for the love of god enter a real zip code")
    else:
        predictor = get_predictor()
        try:
            with st.spinner("cookin up"):
                prediction = predictor.predict(zipcode)
        except PredictionError as e:
            st.error(f"Error: {e}")
        else:
            render(prediction, predictor.config.scoring.score_bar_max)
