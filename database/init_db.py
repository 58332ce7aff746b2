import logging
from sqlalchemy import text
from tenacity import retry, stop_after_attempt, wait_fixed

from database.database import get_engine
from database.models import Base

logger = logging.getLogger(__name__)

# Writes the QCS detail row and the profile summary in one transaction.
ATOMIC_QCS_UPDATE_SQL = """
CREATE OR REPLACE FUNCTION atomic_qcs_update(
    p_user_id text,
    p_total_score integer,
    p_logic_score integer,
    p_ai_score integer,
    p_ai_meta text,
    p_per_category text,
    p_total_score_float double precision,
    p_profile_score integer,
    p_college_tier integer,
    p_personality_depth integer,
    p_behavior_score integer
) RETURNS jsonb
LANGUAGE plpgsql
AS $$
DECLARE
    v_now timestamptz := timezone('UTC', now());
BEGIN
    INSERT INTO qcs (
        id, user_id, profile_score, college_tier, personality_depth, behavior_score,
        logic_score, ai_score, total_score, total_score_float, per_category, ai_meta, last_computed_at
    ) VALUES (
        gen_random_uuid(), p_user_id, p_profile_score, p_college_tier, p_personality_depth, p_behavior_score,
        p_logic_score, p_ai_score, p_total_score, p_total_score_float,
        COALESCE(p_per_category::jsonb, '{}'::jsonb), p_ai_meta::jsonb, v_now
    )
    ON CONFLICT (user_id) DO UPDATE SET
        profile_score = EXCLUDED.profile_score,
        college_tier = EXCLUDED.college_tier,
        personality_depth = EXCLUDED.personality_depth,
        behavior_score = EXCLUDED.behavior_score,
        logic_score = EXCLUDED.logic_score,
        ai_score = EXCLUDED.ai_score,
        total_score = EXCLUDED.total_score,
        total_score_float = EXCLUDED.total_score_float,
        per_category = EXCLUDED.per_category,
        ai_meta = EXCLUDED.ai_meta,
        last_computed_at = EXCLUDED.last_computed_at;

    UPDATE profiles
       SET total_qcs = p_total_score,
           qcs_synced_at = v_now
     WHERE user_id = p_user_id;

    RETURN jsonb_build_object('user_id', p_user_id, 'total_score', p_total_score, 'updated_at', v_now);
END;
$$;
"""


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
def init_db():
    logger.info("Initializing database...")
    try:
        engine = get_engine()
        Base.metadata.create_all(bind=engine)
        logger.info("Tables created or verified.")

        with engine.connect() as connection:
            connection.execute(text(ATOMIC_QCS_UPDATE_SQL))
            connection.commit()
            logger.info("Created or replaced atomic_qcs_update().")

    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
